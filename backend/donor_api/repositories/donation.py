"""Donation repository with a compare-and-set status transition."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from donor_api.models.donation import TERMINAL_STATUSES, Donation
from donor_api.repositories.base import BaseRepository


class DonationRepository(BaseRepository[Donation]):
    """Persistence-only repository for :class:`Donation`."""

    model = Donation

    def _sortable_fields(self):
        return {
            "id": Donation.id,
            "status": Donation.status,
            "scheduled_for": Donation.scheduled_for,
            "requested_at": Donation.requested_at,
            "created_at": Donation.created_at,
        }

    def _filterable_fields(self):
        return {
            "status": Donation.status,
            "user_id": Donation.user_id,
            "center_id": Donation.center_id,
        }

    def _updatable_fields(self):
        return {"status", "scheduled_for", "notes", "center_id", "completed_at"}

    def transition(self, donation_id: int, values: Mapping[str, Any]) -> bool:
        """Apply ``values`` only while the donation is still non-terminal.

        A single ``UPDATE ... WHERE status NOT IN (terminal)`` statement, so
        of two racing writers at most one can move a donation into a
        terminal state.

        :returns: ``True`` when the row was updated.
        :rtype: bool
        """
        self._sanitize_update_fields(values)
        updated = self.update_where(
            donation_id,
            values,
            Donation.status.not_in(list(TERMINAL_STATUSES)),
        )
        return updated == 1
