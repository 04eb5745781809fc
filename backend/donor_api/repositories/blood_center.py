"""Blood center repository."""

from __future__ import annotations

from donor_api.models.blood_center import BloodCenter
from donor_api.repositories.base import BaseRepository


class BloodCenterRepository(BaseRepository[BloodCenter]):
    """Persistence-only repository for :class:`BloodCenter`."""

    model = BloodCenter

    def _sortable_fields(self):
        return {
            "id": BloodCenter.id,
            "name": BloodCenter.name,
            "current_donor_count": BloodCenter.current_donor_count,
            "created_at": BloodCenter.created_at,
        }

    def _filterable_fields(self):
        return {"archived": BloodCenter.archived}

    def _updatable_fields(self):
        return {
            "name",
            "address",
            "phone",
            "latitude",
            "longitude",
            "operating_hours",
            "current_donor_count",
        }

    def set_archived(self, center: BloodCenter, archived: bool) -> BloodCenter:
        """Flip the archive flag (not part of the public update whitelist)."""
        center.archived = archived
        self.flush()
        return center
