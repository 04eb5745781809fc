"""Version 1 of the donor API."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .blood_centers import bp as blood_centers_bp
from .donations import bp as donations_bp
from .health import bp as health_bp
from .users import bp as users_bp

API_VERSION = "v1"

# (blueprint, prefix below /api/v1)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (users_bp, "/users"),
    (donations_bp, "/donations"),
    (blood_centers_bp, "/blood-centers"),
]
