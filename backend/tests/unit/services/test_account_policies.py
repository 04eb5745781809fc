"""Tests for the pure ban/admin toggle decisions and ownership checks."""

from __future__ import annotations

import pytest

from donor_api.models.user import AccountStatus, Role
from donor_api.services._shared.errors import BusinessRuleError
from donor_api.services._shared.policies.accounts import (
    CANNOT_BAN_ADMIN,
    CANNOT_PROMOTE_BANNED,
    next_roles_on_admin_toggle,
    next_status_on_ban_toggle,
)
from donor_api.services._shared.policies.common import has_any_role, is_owner_or_admin

USER = frozenset({Role.USER})
ADMIN = frozenset({Role.USER, Role.ADMIN})


class TestBanToggle:
    def test_flips_between_active_and_banned(self):
        assert next_status_on_ban_toggle(USER, AccountStatus.ACTIVE) == AccountStatus.BANNED
        assert next_status_on_ban_toggle(USER, AccountStatus.BANNED) == AccountStatus.ACTIVE

    def test_admin_cannot_be_banned(self):
        with pytest.raises(BusinessRuleError, match=CANNOT_BAN_ADMIN):
            next_status_on_ban_toggle(ADMIN, AccountStatus.ACTIVE)


class TestAdminToggle:
    def test_grants_and_revokes(self):
        assert next_roles_on_admin_toggle(USER, AccountStatus.ACTIVE) == ADMIN
        assert next_roles_on_admin_toggle(ADMIN, AccountStatus.ACTIVE) == USER

    def test_admin_only_set_falls_back_to_user(self):
        result = next_roles_on_admin_toggle({Role.ADMIN}, AccountStatus.ACTIVE)
        assert result == USER

    def test_banned_user_cannot_be_promoted(self):
        with pytest.raises(BusinessRuleError, match=CANNOT_PROMOTE_BANNED):
            next_roles_on_admin_toggle(USER, AccountStatus.BANNED)


class TestOwnership:
    def test_owner_or_admin(self):
        assert is_owner_or_admin(actor_id=1, actor_roles=USER, owner_id=1)
        assert not is_owner_or_admin(actor_id=2, actor_roles=USER, owner_id=1)
        assert is_owner_or_admin(actor_id=2, actor_roles=ADMIN, owner_id=1)
        assert not is_owner_or_admin(actor_id=None, actor_roles=USER, owner_id=1)

    def test_has_any_role(self):
        assert has_any_role(ADMIN, {Role.ADMIN})
        assert not has_any_role(USER, {Role.ADMIN})
