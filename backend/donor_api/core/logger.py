"""JSON logging with request correlation.

Every record is one JSON object on stdout. Records emitted while a request is
active carry its ``request_id`` and, once a gate has resolved the caller,
``principal_id``. Structured ``extra`` fields passed by services
(``user_id``, ``donation_id``, ...) are copied through unchanged.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Attach ``request_id`` and ``principal_id`` (when known) to records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            principal = g.get("principal")
            record.principal_id = principal.id if principal is not None else None
        else:
            record.request_id = None
        return True


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request.

    Taken from the first correlation header present, otherwise generated,
    and memoised on ``g``. Outside a request a fresh id is returned.
    """
    if not has_request_context():
        return str(uuid4())
    if "request_id" not in g:
        incoming = next(
            (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
        )
        g.request_id = incoming or str(uuid4())
    return g.request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout through :class:`JSONFormatter`."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id before handlers run and echo it on every response."""

    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
