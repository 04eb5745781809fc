"""Authentication endpoints: register, login, refresh rotation, logout, me."""

from __future__ import annotations

from flask import Blueprint, current_app, g, request

from donor_api.api.deps import (
    auth_service,
    clear_refresh_cookie,
    json_response,
    require_auth,
    require_refresh,
    service_context,
    set_refresh_cookie,
    timing,
)
from donor_api.schemas import LoginSchema, RegisterSchema, SessionSchema, UserSchema
from donor_api.services.auth.dto import LoginIn
from donor_api.services.identity.dto import UserRegisterIn
from donor_api.services.identity.service import IdentityService

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
session_schema = SessionSchema()
user_schema = UserSchema()


@bp.post("/register")
@timing
def register():
    """Register a new donor account with the default ``user`` role."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    email = payload.pop("email")
    password = payload.pop("password")
    service = IdentityService(ctx=service_context())
    user = service.register_user(UserRegisterIn(email=email, password=password, profile=payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials; the refresh token is set as an HttpOnly cookie."""

    data = login_schema.load(request.get_json(silent=True) or {})
    session = auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    body = {
        "data": session_schema.dump(
            {"access_token": session.tokens.access_token, "user": session.user}
        )
    }
    response = json_response(body)
    set_refresh_cookie(
        response, session.tokens.refresh_token, session.tokens.refresh_expires_at
    )
    return response


@bp.post("/refresh")
@require_refresh
@timing
def refresh():
    """Rotate the token pair. The presented refresh token cannot be reused."""

    tokens = auth_service().refresh(g.principal, g.refresh_claims)
    response = json_response({"data": session_schema.dump({"access_token": tokens.access_token})})
    set_refresh_cookie(response, tokens.refresh_token, tokens.refresh_expires_at)
    return response


@bp.post("/logout")
@require_auth
@timing
def logout():
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    auth_service().logout(token)
    response = json_response({"message": "Logged out successfully"})
    clear_refresh_cookie(response)
    return response


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    user = IdentityService(ctx=service_context()).get_user(g.principal.id)
    return json_response({"data": user_schema.dump(user)})
