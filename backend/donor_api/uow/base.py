"""Unit of Work contract services program against."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from donor_api.repositories import BloodCenterRepository, DonationRepository, UserRepository


class UnitOfWork(ABC):
    """
    One transactional boundary around a use case.

    The repositories share a single session, so everything written through
    them lands (or is discarded) together when the block exits.
    """

    users: UserRepository
    blood_centers: BloodCenterRepository
    donations: DonationRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
