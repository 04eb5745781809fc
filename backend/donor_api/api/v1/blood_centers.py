"""Blood center endpoints. Reads are public; writes are admin-only."""

from __future__ import annotations

from flask import Blueprint, request

from donor_api.api.deps import (
    json_response,
    list_response,
    parse_id,
    parse_pagination,
    permit,
    require_auth,
    service_context,
    timing,
)
from donor_api.models.user import Role
from donor_api.schemas import (
    BloodCenterCreateSchema,
    BloodCenterFilterSchema,
    BloodCenterSchema,
    BloodCenterUpdateSchema,
)
from donor_api.services.blood_centers.dto import BloodCenterCreateIn
from donor_api.services.blood_centers.service import BloodCenterService

bp = Blueprint("blood_centers", __name__)

center_schema = BloodCenterSchema()
center_list_schema = BloodCenterSchema(many=True)
center_create_schema = BloodCenterCreateSchema()
center_update_schema = BloodCenterUpdateSchema()
center_filter_schema = BloodCenterFilterSchema()


def _service() -> BloodCenterService:
    return BloodCenterService(ctx=service_context())


@bp.post("")
@require_auth
@permit(Role.ADMIN)
@timing
def create_center():
    data = center_create_schema.load(request.get_json(silent=True) or {})
    center = _service().create_center(BloodCenterCreateIn(**data))
    return json_response({"data": center_schema.dump(center)}, status=201)


@bp.get("")
@timing
def list_centers():
    filters = center_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, meta = _service().list_centers(
        archived=filters["archived"],
        page=pagination.page,
        limit=pagination.limit,
        sort=pagination.sort,
    )
    return list_response(center_list_schema.dump(items), meta)


@bp.get("/<center_id>")
@timing
def get_center(center_id: str):
    center = _service().get_center(parse_id(center_id))
    return json_response({"data": center_schema.dump(center)})


@bp.put("/<center_id>")
@require_auth
@permit(Role.ADMIN)
@timing
def update_center(center_id: str):
    target_id = parse_id(center_id)
    changes = center_update_schema.load(request.get_json(silent=True) or {})
    center = _service().update_center(target_id, changes)
    return json_response({"data": center_schema.dump(center)})


@bp.patch("/<center_id>/archive")
@require_auth
@permit(Role.ADMIN)
@timing
def toggle_archive(center_id: str):
    """Archive an active center or restore an archived one."""

    center = _service().toggle_archive(parse_id(center_id))
    action = "archived" if center.archived else "unarchived"
    return json_response(
        {"message": f"Blood center {action} successfully", "data": center_schema.dump(center)}
    )
