"""Expose the application factory at package level.

``from donor_api import create_app`` is the entry point for ``flask --app``,
Gunicorn and the test-suite.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
