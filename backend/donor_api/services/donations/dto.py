"""DTOs for DonationService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from donor_api.models.donation import DonationStatus

if TYPE_CHECKING:
    from donor_api.models.donation import Donation


@dataclass(frozen=True, slots=True)
class DonationCreateIn:
    """
    Input DTO for a donation request. The requester is always the caller and
    the initial status is always ``requested``.

    :param center_id: Target blood center.
    :type center_id: int
    :param scheduled_for: Appointment instant; must lie in the future.
    :type scheduled_for: datetime
    :param notes: Optional free text.
    :type notes: str | None
    """

    center_id: int
    scheduled_for: datetime
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class DonationListFilters:
    status: DonationStatus | None = None
    user_id: int | None = None
    center_id: int | None = None


@dataclass(frozen=True, slots=True)
class DonationOut:
    id: int
    user_id: int
    center_id: int
    center_name: str | None
    status: str
    requested_at: datetime
    scheduled_for: datetime
    completed_at: datetime | None
    notes: str | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_model(cls, donation: Donation) -> DonationOut:
        center = donation.center
        return cls(
            id=donation.id,
            user_id=donation.user_id,
            center_id=donation.center_id,
            center_name=center.name if center is not None else None,
            status=DonationStatus(donation.status).value,
            requested_at=donation.requested_at,
            scheduled_for=donation.scheduled_for,
            completed_at=donation.completed_at,
            notes=donation.notes,
            created_at=donation.created_at,
            updated_at=donation.updated_at,
        )
