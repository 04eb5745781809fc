"""Shared API helpers: request parsing, gates and response shaping."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from donor_api.core.errors import Forbidden, InvalidId, Unauthorized
from donor_api.core.extensions import get_denylist, get_token_provider
from donor_api.core.logger import ensure_request_id
from donor_api.models.user import Role
from donor_api.schemas.common import PaginationQuerySchema, build_pagination
from donor_api.services._shared.base import ServiceContext
from donor_api.services._shared.dto import PageMeta
from donor_api.services._shared.policies.common import has_any_role
from donor_api.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "Bearer "


@dataclass(slots=True)
class Pagination:
    """Container holding pagination arguments parsed from the request."""

    page: int
    limit: int
    sort: list[str]


def parse_pagination() -> Pagination:
    """Parse ``page``/``limit``/``sort`` from ``request.args`` using config bounds."""

    schema = PaginationQuerySchema(
        default_limit=current_app.config.get("PAGINATION_DEFAULT_LIMIT", 10),
        max_limit=current_app.config.get("PAGINATION_MAX_LIMIT", 100),
    )
    data = schema.load(request.args)
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


def parse_id(raw: str) -> int:
    """Convert a path segment into a positive integer id or raise ``invalid_id``."""

    if not raw.isdigit() or int(raw) < 1:
        raise InvalidId()
    return int(raw)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def list_response(items: list[dict[str, Any]], meta: PageMeta) -> Response:
    return json_response({"items": items, "pagination": build_pagination(meta)})


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Services
# --------------------------------------------------------------------------- #


def service_context() -> ServiceContext:
    """Build the request-scoped context handed to services."""

    return ServiceContext(actor=g.get("principal"), request_id=ensure_request_id())


def auth_service() -> AuthService:
    return AuthService(
        token_provider=get_token_provider(),
        denylist_store=get_denylist(),
        ctx=service_context(),
    )


# --------------------------------------------------------------------------- #
# Gates
# --------------------------------------------------------------------------- #


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX) :].strip() or None


def require_auth(func: F) -> F:
    """Auth Gate: resolve the caller from the bearer access token into ``g.principal``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.principal = auth_service().resolve_access(_bearer_token())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_refresh(func: F) -> F:
    """Refresh Gate: resolve the caller from the refresh-token cookie.

    Sets ``g.principal`` and ``g.refresh_claims`` for the handler.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
        g.principal, g.refresh_claims = auth_service().resolve_refresh(token)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def permit(*roles: Role) -> Callable[[F], F]:
    """Permission Gate: require one of ``roles``. Apply after :func:`require_auth`."""

    required = frozenset(roles)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            principal = g.get("principal")
            if principal is None:
                raise Unauthorized()
            if not has_any_role(principal.roles, required):
                raise Forbidden()
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


# --------------------------------------------------------------------------- #
# Refresh cookie
# --------------------------------------------------------------------------- #


def _cookie_path() -> str:
    base = current_app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    return f"{base}/v1/auth"


def set_refresh_cookie(response: Response, token: str, expires_at: datetime) -> None:
    config = current_app.config
    response.set_cookie(
        config["REFRESH_COOKIE_NAME"],
        token,
        max_age=int(config["JWT_REFRESH_EXPIRES_HOURS"]) * 3600,
        expires=expires_at,
        path=_cookie_path(),
        secure=bool(config["REFRESH_COOKIE_SECURE"]),
        httponly=True,
        samesite=config["REFRESH_COOKIE_SAMESITE"],
    )


def clear_refresh_cookie(response: Response) -> None:
    config = current_app.config
    response.delete_cookie(
        config["REFRESH_COOKIE_NAME"],
        path=_cookie_path(),
        secure=bool(config["REFRESH_COOKIE_SECURE"]),
        httponly=True,
        samesite=config["REFRESH_COOKIE_SAMESITE"],
    )
