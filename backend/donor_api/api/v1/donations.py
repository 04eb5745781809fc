"""Donation endpoints."""

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
    DonationCreateSchema,
    DonationFilterSchema,
    DonationSchema,
    DonationUpdateSchema,
)
from donor_api.services.donations.dto import DonationCreateIn, DonationListFilters
from donor_api.services.donations.service import DonationService

bp = Blueprint("donations", __name__)

donation_schema = DonationSchema()
donation_list_schema = DonationSchema(many=True)
donation_create_schema = DonationCreateSchema()
donation_update_schema = DonationUpdateSchema()
donation_filter_schema = DonationFilterSchema()


def _service() -> DonationService:
    return DonationService(ctx=service_context())


@bp.post("")
@require_auth
@timing
def create_donation():
    """Request a donation for the caller; it always starts as ``requested``."""

    data = donation_create_schema.load(request.get_json(silent=True) or {})
    donation = _service().create_donation(DonationCreateIn(**data))
    return json_response({"data": donation_schema.dump(donation)}, status=201)


@bp.get("/my")
@require_auth
@timing
def list_my_donations():
    filters = donation_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, meta = _service().list_my_donations(
        status=filters["status"],
        page=pagination.page,
        limit=pagination.limit,
        sort=pagination.sort,
    )
    return list_response(donation_list_schema.dump(items), meta)


@bp.get("")
@require_auth
@permit(Role.ADMIN)
@timing
def list_donations():
    """Admin listing, filterable by ``status``, ``user_id`` and ``center_id``."""

    filters = donation_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, meta = _service().list_donations(
        DonationListFilters(**filters),
        page=pagination.page,
        limit=pagination.limit,
        sort=pagination.sort,
    )
    return list_response(donation_list_schema.dump(items), meta)


@bp.get("/<donation_id>")
@require_auth
@timing
def get_donation(donation_id: str):
    donation = _service().get_donation(parse_id(donation_id))
    return json_response({"data": donation_schema.dump(donation)})


@bp.put("/<donation_id>")
@require_auth
@permit(Role.ADMIN)
@timing
def update_donation(donation_id: str):
    """Admin update; completing stamps ``completed_at`` and bumps the donor's count."""

    target_id = parse_id(donation_id)
    changes = donation_update_schema.load(request.get_json(silent=True) or {})
    donation = _service().update_donation(target_id, changes)
    return json_response({"data": donation_schema.dump(donation)})
