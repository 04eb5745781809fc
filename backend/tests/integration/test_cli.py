"""Tests for the ``flask accounts`` CLI group."""

from __future__ import annotations

from donor_api.models.user import Role
from donor_api.repositories.user import UserRepository
from tests.factories.user import UserFactory


def _invoke(app, *args, input=None):
    return app.test_cli_runner().invoke(args=["accounts", "create-admin", *args], input=input)


def test_creates_admin(app, session):
    result = _invoke(app, "ops@example.com", "--password", "pw123")

    assert result.exit_code == 0, result.output
    assert "Created admin ops@example.com" in result.output
    created = UserRepository(session=session).get_by_email("ops@example.com")
    assert created.roles == frozenset({Role.USER, Role.ADMIN})
    assert created.verify_password("pw123")


def test_prompts_for_password(app, session):
    result = _invoke(app, "prompted@example.com", input="pw123\npw123\n")

    assert result.exit_code == 0, result.output
    assert UserRepository(session=session).get_by_email("prompted@example.com") is not None


def test_promotes_existing_user(app, session):
    existing = UserFactory(email="member@example.com")
    session.commit()

    result = _invoke(app, "member@example.com", "--password", "")

    assert result.exit_code == 0, result.output
    assert f"Promoted admin member@example.com (id={existing.id})" in result.output


def test_refuses_banned_user(app, session):
    UserFactory(email="blocked@example.com", banned=True)
    session.commit()

    result = _invoke(app, "blocked@example.com", "--password", "pw123")

    assert result.exit_code != 0
    assert "Cannot grant admin role to a banned user" in result.output
