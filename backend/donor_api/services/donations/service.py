"""
DonationService
===============

Donation requests and their lifecycle:
- Users request donations for themselves at an active blood center.
- Owners and admins read a donation; only admins move it through its states.
- Completing a donation updates the donor's aggregates in the same
  transaction as the status change.
"""

from __future__ import annotations

import logging
from typing import Any

from donor_api.models.donation import Donation, DonationStatus
from donor_api.services._shared.base import BaseService
from donor_api.services._shared.dto import PageMeta
from donor_api.services._shared.errors import (
    BusinessRuleError,
    ImmutableStateError,
    InvalidInputError,
    NotFoundError,
)
from donor_api.services.donations.dto import DonationCreateIn, DonationListFilters, DonationOut
from donor_api.services.donations.lifecycle import plan_update
from donor_api.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

VIEW_FORBIDDEN = "You do not have permission to view this donation"
CENTER_ARCHIVED = "Blood center is archived and does not accept donations"


class DonationService(BaseService):
    """Application service for the `Donation` aggregate."""

    # --------------------------------------------------------------------- #
    # Requests
    # --------------------------------------------------------------------- #

    def create_donation(self, dto: DonationCreateIn) -> DonationOut:
        """
        Request a donation for the caller.

        :raises InvalidInputError: ``scheduled_for`` is not in the future.
        :raises NotFoundError: Unknown blood center.
        :raises BusinessRuleError: The blood center is archived.
        """
        actor = self.require_actor()
        now = self.now_utc()
        if dto.scheduled_for <= now:
            raise InvalidInputError("scheduled_for must be in the future")

        with self.rw_uow() as uow:
            self._ensure_center_available(uow, dto.center_id)
            try:
                donation = uow.donations.add(
                    Donation(
                        user_id=actor.id,
                        center_id=dto.center_id,
                        status=DonationStatus.REQUESTED,
                        requested_at=now,
                        scheduled_for=dto.scheduled_for,
                        notes=dto.notes,
                    )
                )
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
            out = DonationOut.from_model(donation)

        log.info(
            "donation.requested",
            extra={"donation_id": out.id, "user_id": actor.id, "center_id": out.center_id},
        )
        return out

    # --------------------------------------------------------------------- #
    # Reads
    # --------------------------------------------------------------------- #

    def get_donation(self, donation_id: int) -> DonationOut:
        """
        :raises NotFoundError: Unknown donation.
        :raises AuthorizationError: Caller is neither the owner nor an admin.
        """
        self.require_actor()
        with self.ro_uow() as uow:
            donation = uow.donations.get(donation_id)
            if donation is None:
                raise NotFoundError("Donation", donation_id)
            self.ensure_owner_or_admin(donation.user_id, msg=VIEW_FORBIDDEN)
            return DonationOut.from_model(donation)

    def list_my_donations(
        self,
        *,
        status: DonationStatus | None = None,
        page: int,
        limit: int,
        sort: list[str] | None = None,
    ) -> tuple[list[DonationOut], PageMeta]:
        actor = self.require_actor()
        return self._list(
            DonationListFilters(status=status, user_id=actor.id), page=page, limit=limit, sort=sort
        )

    def list_donations(
        self,
        filters: DonationListFilters,
        *,
        page: int,
        limit: int,
        sort: list[str] | None = None,
    ) -> tuple[list[DonationOut], PageMeta]:
        """Admin listing across all users."""
        self.ensure_admin()
        return self._list(filters, page=page, limit=limit, sort=sort)

    # --------------------------------------------------------------------- #
    # Lifecycle
    # --------------------------------------------------------------------- #

    def update_donation(self, donation_id: int, changes: dict[str, Any]) -> DonationOut:
        """
        Admin update of status, schedule, notes or center.

        Moving into ``completed`` stamps ``completed_at`` (defaulting to now)
        and, atomically with the status write, increments the donor's
        ``donation_count`` and sets ``last_donation_date``.

        :raises NotFoundError: Unknown donation, or its center/donor vanished.
        :raises ImmutableStateError: The donation is already terminal, or
            became terminal concurrently.
        :raises BusinessRuleError: The (target) blood center is archived.
        """
        actor = self.ensure_admin()

        with self.rw_uow() as uow:
            donation = uow.donations.get_for_update(donation_id)
            if donation is None:
                raise NotFoundError("Donation", donation_id)

            plan = plan_update(donation.status, changes, self.now_utc())
            self._ensure_center_available(uow, plan.values.get("center_id", donation.center_id))

            if not uow.donations.transition(donation_id, plan.values):
                raise ImmutableStateError("Donation was already finalized")

            if plan.completes:
                updated = uow.users.record_completed_donation(donation.user_id, plan.completed_at)
                if updated != 1:
                    raise NotFoundError("User", donation.user_id)

            uow.donations.refresh(donation)
            out = DonationOut.from_model(donation)

        event = "donation.completed" if plan.completes else "donation.updated"
        log.info(
            event,
            extra={
                "donation_id": donation_id,
                "actor_id": actor.id,
                "user_id": out.user_id,
                "status": out.status,
            },
        )
        return out

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _list(
        self, filters: DonationListFilters, *, page: int, limit: int, sort: list[str] | None
    ) -> tuple[list[DonationOut], PageMeta]:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort)
        with self.ro_uow() as uow:
            result = uow.donations.paginate(
                pagination,
                filters={
                    "status": filters.status,
                    "user_id": filters.user_id,
                    "center_id": filters.center_id,
                },
            )
            items = [DonationOut.from_model(d) for d in result.items]
        return items, PageMeta.from_page(result)

    @staticmethod
    def _ensure_center_available(uow: SQLAlchemyUnitOfWork, center_id: int) -> None:
        center = uow.blood_centers.get(center_id)
        if center is None:
            raise NotFoundError("Blood center", center_id)
        if center.archived:
            raise BusinessRuleError(CENTER_ARCHIVED)
