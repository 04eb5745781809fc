"""HTTP API: versioned blueprint groups mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from flask import Flask


def _join(*segments: str) -> str:
    return "/" + "/".join(s.strip("/") for s in segments if s.strip("/"))


def init_app(app: Flask) -> None:
    """Mount every v1 blueprint at ``<API_BASE_PREFIX>/v1/<prefix>``.

    The refresh cookie path is derived from the same prefix, so changing
    ``API_BASE_PREFIX`` moves both together.
    """
    from donor_api.api import v1

    base = app.config.get("API_BASE_PREFIX", "/api")
    for blueprint, prefix in v1.REGISTRY:
        app.register_blueprint(blueprint, url_prefix=_join(base, v1.API_VERSION, prefix))


__all__ = ["init_app"]
