"""
BloodCenterService
==================

Registry of blood centers. Reads are public; writes and archiving are
admin-only. Centers are archived rather than deleted so existing donations
keep a valid reference.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from donor_api.models.blood_center import BloodCenter
from donor_api.services._shared.base import BaseService
from donor_api.services._shared.dto import PageMeta
from donor_api.services._shared.errors import InvalidInputError, NotFoundError
from donor_api.services.blood_centers.dto import BloodCenterCreateIn, BloodCenterOut

log = logging.getLogger(__name__)


class BloodCenterService(BaseService):
    """Application service for the `BloodCenter` aggregate."""

    def create_center(self, dto: BloodCenterCreateIn) -> BloodCenterOut:
        actor = self.ensure_admin()
        with self.rw_uow() as uow:
            try:
                center = uow.blood_centers.add(BloodCenter(**asdict(dto)))
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
            out = BloodCenterOut.from_model(center)

        log.info("center.created", extra={"center_id": out.id, "actor_id": actor.id})
        return out

    def get_center(self, center_id: int) -> BloodCenterOut:
        with self.ro_uow() as uow:
            center = uow.blood_centers.get(center_id)
            if center is None:
                raise NotFoundError("Blood center", center_id)
            return BloodCenterOut.from_model(center)

    def list_centers(
        self,
        *,
        archived: bool | None,
        page: int,
        limit: int,
        sort: list[str] | None = None,
    ) -> tuple[list[BloodCenterOut], PageMeta]:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort)
        with self.ro_uow() as uow:
            result = uow.blood_centers.paginate(pagination, filters={"archived": archived})
            items = [BloodCenterOut.from_model(c) for c in result.items]
        return items, PageMeta.from_page(result)

    def update_center(self, center_id: int, changes: dict[str, Any]) -> BloodCenterOut:
        """
        Apply whitelisted changes.

        :raises InvalidInputError: "No fields to update" on an empty change set.
        """
        actor = self.ensure_admin()
        if not changes:
            raise InvalidInputError("No fields to update")

        with self.rw_uow() as uow:
            center = uow.blood_centers.get_for_update(center_id)
            if center is None:
                raise NotFoundError("Blood center", center_id)
            try:
                uow.blood_centers.update(center, **changes)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
            out = BloodCenterOut.from_model(center)

        log.info("center.updated", extra={"center_id": center_id, "actor_id": actor.id})
        return out

    def toggle_archive(self, center_id: int) -> BloodCenterOut:
        """Archive an active center, or restore an archived one."""
        actor = self.ensure_admin()
        with self.rw_uow() as uow:
            center = uow.blood_centers.get_for_update(center_id)
            if center is None:
                raise NotFoundError("Blood center", center_id)
            uow.blood_centers.set_archived(center, not center.archived)
            out = BloodCenterOut.from_model(center)

        log.info(
            "center.archive_toggled",
            extra={"center_id": center_id, "actor_id": actor.id, "status": out.archived},
        )
        return out
