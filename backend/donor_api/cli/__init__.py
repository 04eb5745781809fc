"""Operator commands exposed through ``flask <group> <command>``."""

from __future__ import annotations

from flask import Flask

from .accounts import accounts_cli


def init_app(app: Flask) -> None:
    app.cli.add_command(accounts_cli)
