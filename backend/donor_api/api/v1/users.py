"""User endpoints: admin listing, self-or-admin profile, admin toggles."""

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
from donor_api.models.user import AccountStatus, Role
from donor_api.schemas import (
    PasswordChangeSchema,
    UserFilterSchema,
    UserSchema,
    UserUpdateSchema,
)
from donor_api.services.identity.dto import UserListFilters, UserPasswordChangeIn, UserUpdateIn
from donor_api.services.identity.service import IdentityService

bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_update_schema = UserUpdateSchema()
user_filter_schema = UserFilterSchema()
password_schema = PasswordChangeSchema()


def _service() -> IdentityService:
    return IdentityService(ctx=service_context())


@bp.get("")
@require_auth
@permit(Role.ADMIN)
@timing
def list_users():
    """Return paginated users."""

    filters = user_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, meta = _service().list_users(
        UserListFilters(**filters),
        page=pagination.page,
        limit=pagination.limit,
        sort=pagination.sort,
    )
    return list_response(user_list_schema.dump(items), meta)


@bp.get("/<user_id>")
@require_auth
@timing
def get_user(user_id: str):
    user = _service().get_user(parse_id(user_id))
    return json_response({"data": user_schema.dump(user)})


@bp.put("/<user_id>")
@require_auth
@timing
def update_user(user_id: str):
    """Update profile fields of the caller, or of anyone for an admin."""

    target_id = parse_id(user_id)
    changes = user_update_schema.load(request.get_json(silent=True) or {})
    user = _service().update_profile(target_id, UserUpdateIn(changes=changes))
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/<user_id>/password")
@require_auth
@timing
def change_password(user_id: str):
    target_id = parse_id(user_id)
    data = password_schema.load(request.get_json(silent=True) or {})
    _service().change_password(
        UserPasswordChangeIn(
            user_id=target_id,
            new_password=data["new_password"],
            current_password=data["current_password"],
        )
    )
    return json_response({"message": "Password updated successfully"})


@bp.patch("/<user_id>/ban")
@require_auth
@permit(Role.ADMIN)
@timing
def toggle_ban(user_id: str):
    user = _service().toggle_ban(parse_id(user_id))
    banned = user.status == AccountStatus.BANNED.value
    message = "User banned successfully" if banned else "User unbanned successfully"
    return json_response({"message": message, "data": user_schema.dump(user)})


@bp.patch("/<user_id>/admin")
@require_auth
@permit(Role.ADMIN)
@timing
def toggle_admin(user_id: str):
    user = _service().toggle_admin(parse_id(user_id))
    granted = Role.ADMIN.value in user.roles
    message = "Admin role granted" if granted else "Admin role revoked"
    return json_response({"message": message, "data": user_schema.dump(user)})
