"""Flask CLI commands for operator account management."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from donor_api.services._shared.errors import ServiceError
from donor_api.services.identity.service import IdentityService

LOGGER = logging.getLogger(__name__)


@click.group("accounts")
def accounts_cli() -> None:
    """Operator commands for user accounts."""


@accounts_cli.command("create-admin")
@click.argument("email")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password for a new account, or a replacement for an existing one.",
)
@with_appcontext
def create_admin_command(email: str, password: str) -> None:
    """Create an admin account, or grant the admin role to an existing one."""
    try:
        user, created = IdentityService().ensure_admin_account(email, password or None)
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc

    verb = "Created" if created else "Promoted"
    LOGGER.info("accounts.create_admin", extra={"user_id": user.id})
    click.echo(f"{verb} admin {user.email} (id={user.id})")
