# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from math import ceil
from typing import TYPE_CHECKING

from donor_api.models.user import AccountStatus, Role

if TYPE_CHECKING:
    from donor_api.models.user import User
    from donor_api.repositories.base import Page


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Identity resolved by a gate and attached to the request.

    Built from the *current* database row on every request, so role and
    status changes take effect on the very next call.

    :param id: User identifier.
    :type id: int
    :param email: Login email.
    :type email: str
    :param roles: Role set held at resolution time.
    :type roles: frozenset[Role]
    :param status: Account status at resolution time.
    :type status: AccountStatus
    """

    id: int
    email: str
    roles: frozenset[Role]
    status: AccountStatus

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    @classmethod
    def from_user(cls, user: User) -> Principal:
        return cls(
            id=user.id,
            email=user.email,
            roles=frozenset(user.roles),
            status=AccountStatus(user.status),
        )


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param page: Current page (1-based).
    :type page: int
    :param limit: Page size.
    :type limit: int
    :param total: Total rows available.
    :type total: int
    :param total_pages: Number of pages for ``limit``.
    :type total_pages: int
    :param has_next_page: Whether a next page exists.
    :type has_next_page: bool
    :param has_prev_page: Whether a previous page exists.
    :type has_prev_page: bool
    """

    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_page(cls, page: Page) -> PageMeta:
        total_pages = ceil(page.total / page.limit) if page.limit else 0
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=total_pages,
            has_next_page=page.page < total_pages,
            has_prev_page=page.page > 1,
        )
