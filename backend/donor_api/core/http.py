"""HTTP edge settings: trusted proxy headers and cross-origin access.

Both matter for the refresh cookie. Behind a TLS-terminating proxy the app
must see ``X-Forwarded-Proto`` to treat requests as secure, and a browser
only sends the cookie cross-origin when CORS allows credentials for an
explicit origin list.
"""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from donor_api.core.logger import REQUEST_ID_HEADER

ALLOWED_HEADERS = ("Authorization", "Content-Type", REQUEST_ID_HEADER)
ALLOWED_METHODS = ("GET", "POST", "PUT", "PATCH", "OPTIONS")


def parse_origins(raw: str | None) -> list[str]:
    """Split the comma separated ``CORS_ORIGINS`` setting; ``*`` means any origin."""
    return [origin.strip() for origin in (raw or "").split(",") if origin.strip()]


def trust_proxy(app: Flask) -> None:
    """Wrap the WSGI app in ``ProxyFix`` unless ``USE_PROXYFIX`` is off."""
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)


def enable_cors(app: Flask) -> None:
    """
    Allow browser clients on ``CORS_ORIGINS`` to call ``/api/*``.

    With no explicit origins (blank or ``*``) any origin may call the API
    but credentials are disabled, so the refresh cookie stays same-site.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    explicit = bool(origins) and origins != ["*"]
    CORS(
        app,
        resources={r"/api/*": {"origins": origins if explicit else "*"}},
        supports_credentials=explicit,
        allow_headers=list(ALLOWED_HEADERS),
        methods=list(ALLOWED_METHODS),
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
