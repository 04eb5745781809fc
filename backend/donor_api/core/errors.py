"""Problem Details (RFC 7807) responses for every failure the API returns.

Bodies look like::

    {"type": "about:blank", "title": "Forbidden", "status": 403,
     "code": "account_banned", "detail": "Your account is banned",
     "error": "Your account is banned", "instance": "/api/v1/auth/me",
     "request_id": "..."}

``error`` repeats ``detail`` for clients that only read ``{"error": ...}``.
``code`` is stable and machine-readable. Token expiry (``token_expired``) is
always distinct from a bad token (``token_invalid``) so clients know when a
silent refresh is worth trying.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from donor_api.core.logger import ensure_request_id
from donor_api.services._shared import errors as svc

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"


class APIError(Exception):
    """
    An error raised at the HTTP boundary with its status and stable code.

    :param message: Client-safe description.
    :param status_code: HTTP status, ``400`` by default.
    :param code: Machine-readable snake_case identifier.
    :param details: Optional structured payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}


class Unauthorized(APIError):
    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


class Forbidden(APIError):
    def __init__(self, message: str = "Forbidden", code: str = "forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code=code)


class InvalidId(APIError):
    """400 for path identifiers that are not positive integers."""

    def __init__(self, message: str = "Invalid ID format") -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, code="invalid_id")


# Checked in order, so subclasses come before their bases.
SERVICE_ERRORS: tuple[tuple[type[svc.ServiceError], int, str], ...] = (
    (svc.MissingTokenError, 401, "token_missing"),
    (svc.TokenExpiredError, 401, "token_expired"),
    (svc.TokenInvalidError, 401, "token_invalid"),
    (svc.UnknownIdentityError, 401, "user_not_found"),
    (svc.InvalidCredentialsError, 401, "invalid_credentials"),
    (svc.AuthenticationError, 401, "unauthorized"),
    (svc.AccountBannedError, 403, "account_banned"),
    (svc.AuthorizationError, 403, "forbidden"),
    (svc.BusinessRuleError, 403, "business_rule_violation"),
    (svc.NotFoundError, 404, "not_found"),
    (svc.ConflictError, 400, "conflict"),
    (svc.ImmutableStateError, 400, "immutable_state"),
    (svc.InvalidInputError, 400, "invalid_input"),
)


def translate_service_error(exc: svc.ServiceError) -> APIError:
    """Map a service-layer error onto its HTTP status and code."""
    for error_type, status, code in SERVICE_ERRORS:
        if isinstance(exc, error_type):
            return APIError(str(exc), status_code=status, code=code)
    return APIError(str(exc))


def problem(status: int, code: str, message: str, details: dict[str, Any] | None = None) -> Response:
    """Render a problem+json response and log it (5xx with traceback)."""
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "code": code,
        "detail": message,
        "error": message,
        "instance": request.path,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details

    if status >= 500:
        log.error("http.error %s %s", status, code, exc_info=True, extra={"code": code})
    else:
        log.warning("http.error %s %s: %s", status, code, message, extra={"code": code})

    response = jsonify(body)
    response.status_code = status
    response.mimetype = PROBLEM_MIMETYPE
    return response


def _http_code(status: int) -> str:
    try:
        return HTTPStatus(status).name.lower()
    except ValueError:
        return "error"


def init_app(app: Flask) -> None:
    """Register handlers so no error leaves the app as HTML or a raw traceback."""

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        return problem(err.status_code, err.code, err.message, err.details)

    @app.errorhandler(svc.ServiceError)
    def _service_error(err: svc.ServiceError):
        return _api_error(translate_service_error(err))

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        return problem(422, "validation_error", "Validation failed", {"errors": err.messages})

    @app.errorhandler(HTTPException)
    def _http_exception(err: HTTPException):
        status = err.code or 500
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or HTTPStatus(status).phrase).strip()
        return problem(status, _http_code(status), message)

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        # Raw constraint text stays in the log.
        log.info("db.integrity_error: %s", err.orig)
        return problem(409, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def _db_unavailable(err: OperationalError):
        return problem(503, "service_unavailable", "Service temporarily unavailable")

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        return problem(500, "internal_server_error", "Unexpected error")
