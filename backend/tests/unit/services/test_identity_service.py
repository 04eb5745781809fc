"""Tests for IdentityService."""

from __future__ import annotations

import pytest

from donor_api.models.user import AccountStatus, Role
from donor_api.repositories.user import UserRepository
from donor_api.services._shared.base import ServiceContext
from donor_api.services._shared.dto import Principal
from donor_api.services._shared.errors import (
    AuthorizationError,
    BusinessRuleError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from donor_api.services.identity.dto import (
    UserListFilters,
    UserPasswordChangeIn,
    UserRegisterIn,
    UserUpdateIn,
)
from donor_api.services.identity.service import EMAIL_TAKEN, IdentityService
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


def service_for(user=None) -> IdentityService:
    actor = Principal.from_user(user) if user is not None else None
    return IdentityService(ctx=ServiceContext(actor=actor))


@pytest.fixture()
def repo(session) -> UserRepository:
    return UserRepository(session=session)


class TestRegistration:
    def test_register_user_creates_user_with_default_role(self, repo):
        out = service_for().register_user(
            UserRegisterIn(
                email="new@example.com",
                password="secret",
                profile={"full_name": "New Donor", "blood_type": "AB+"},
            )
        )

        assert out.email == "new@example.com"
        assert out.roles == ["user"]
        assert out.status == "active"
        assert out.blood_type == "AB+"
        assert out.donation_count == 0
        assert not hasattr(out, "password_hash")

        stored = repo.get_by_email("new@example.com")
        assert stored.verify_password("secret")

    def test_register_user_raises_conflict_when_email_exists(self):
        UserFactory(email="dup@example.com")
        with pytest.raises(ConflictError, match=EMAIL_TAKEN):
            service_for().register_user(UserRegisterIn(email="dup@example.com", password="other"))

    def test_register_rejects_invalid_profile_values(self):
        with pytest.raises(InvalidInputError):
            service_for().register_user(
                UserRegisterIn(email="x@example.com", password="pw123", profile={"gender": "robot"})
            )


class TestReads:
    def test_self_and_admin_can_read(self):
        owner = UserFactory()
        admin = UserFactory(admin=True)

        assert service_for(owner).get_user(owner.id).id == owner.id
        assert service_for(admin).get_user(owner.id).id == owner.id

    def test_other_user_is_forbidden(self):
        owner, other = UserFactory(), UserFactory()
        with pytest.raises(AuthorizationError):
            service_for(other).get_user(owner.id)

    def test_missing_user(self):
        admin = UserFactory(admin=True)
        with pytest.raises(NotFoundError, match="User not found"):
            service_for(admin).get_user(424242)

    def test_list_users_is_admin_only(self):
        admin = UserFactory(admin=True)
        UserFactory.create_batch(3)
        UserFactory(banned=True)

        items, meta = service_for(admin).list_users(
            UserListFilters(status="banned"), page=1, limit=10
        )
        assert [u.status for u in items] == ["banned"]
        assert meta.total == 1

        with pytest.raises(AuthorizationError):
            service_for(UserFactory()).list_users(UserListFilters(), page=1, limit=10)


class TestProfileUpdates:
    def test_update_own_profile(self):
        owner = UserFactory()
        out = service_for(owner).update_profile(
            owner.id, UserUpdateIn(changes={"full_name": "Renamed", "address": "2 Side St"})
        )
        assert out.full_name == "Renamed"
        assert out.address == "2 Side St"

    def test_update_to_taken_email_conflicts(self):
        UserFactory(email="taken@example.com")
        owner = UserFactory()
        with pytest.raises(ConflictError):
            service_for(owner).update_profile(
                owner.id, UserUpdateIn(changes={"email": "taken@example.com"})
            )

    def test_keeping_own_email_is_not_a_conflict(self):
        owner = UserFactory(email="mine@example.com")
        out = service_for(owner).update_profile(
            owner.id, UserUpdateIn(changes={"email": "mine@example.com"})
        )
        assert out.email == "mine@example.com"

    def test_empty_update_rejected(self):
        owner = UserFactory()
        with pytest.raises(InvalidInputError, match="No fields to update"):
            service_for(owner).update_profile(owner.id, UserUpdateIn(changes={}))

    def test_other_user_cannot_update(self):
        owner, other = UserFactory(), UserFactory()
        with pytest.raises(AuthorizationError):
            service_for(other).update_profile(owner.id, UserUpdateIn(changes={"phone": "1"}))


class TestPasswords:
    def test_self_change_requires_current_password(self, repo, session):
        owner = UserFactory()
        session.commit()
        svc = service_for(owner)

        with pytest.raises(InvalidInputError):
            svc.change_password(UserPasswordChangeIn(user_id=owner.id, new_password="n3w-pass"))
        with pytest.raises(InvalidInputError, match="incorrect"):
            svc.change_password(
                UserPasswordChangeIn(
                    user_id=owner.id, new_password="n3w-pass", current_password="wrong"
                )
            )

        svc.change_password(
            UserPasswordChangeIn(
                user_id=owner.id, new_password="n3w-pass", current_password=DEFAULT_PASSWORD
            )
        )
        stored = repo.get(owner.id)
        assert stored.verify_password("n3w-pass")
        assert not stored.verify_password(DEFAULT_PASSWORD)

    def test_admin_resets_without_current_password(self, repo):
        admin = UserFactory(admin=True)
        target = UserFactory()
        service_for(admin).change_password(
            UserPasswordChangeIn(user_id=target.id, new_password="reset-1")
        )
        assert repo.get(target.id).verify_password("reset-1")


class TestToggles:
    def test_toggle_ban_round_trip(self):
        admin = UserFactory(admin=True)
        target = UserFactory()
        svc = service_for(admin)

        assert svc.toggle_ban(target.id).status == "banned"
        assert svc.toggle_ban(target.id).status == "active"

    def test_banning_an_admin_fails_and_leaves_status(self, repo, session):
        admin = UserFactory(admin=True)
        other_admin = UserFactory(admin=True)
        session.commit()

        with pytest.raises(BusinessRuleError, match="Cannot ban an admin"):
            service_for(admin).toggle_ban(other_admin.id)
        assert repo.get(other_admin.id).status == AccountStatus.ACTIVE

    def test_promoting_a_banned_user_fails_and_leaves_roles(self, repo, session):
        admin = UserFactory(admin=True)
        banned = UserFactory(banned=True)
        session.commit()

        with pytest.raises(BusinessRuleError, match="banned"):
            service_for(admin).toggle_admin(banned.id)
        assert repo.get(banned.id).roles == frozenset({Role.USER})

    def test_toggle_admin_round_trip(self):
        admin = UserFactory(admin=True)
        target = UserFactory()
        svc = service_for(admin)

        assert "admin" in svc.toggle_admin(target.id).roles
        assert svc.toggle_admin(target.id).roles == ["user"]

    def test_toggles_require_admin(self):
        target = UserFactory()
        with pytest.raises(AuthorizationError):
            service_for(UserFactory()).toggle_ban(target.id)


class TestEnsureAdminAccount:
    def test_creates_new_admin(self, repo):
        out, created = IdentityService().ensure_admin_account("ops@example.com", "op-pass")
        assert created is True
        assert "admin" in out.roles
        assert repo.get_by_email("ops@example.com").verify_password("op-pass")

    def test_promotes_existing_user(self):
        existing = UserFactory()
        out, created = IdentityService().ensure_admin_account(existing.email, None)
        assert created is False
        assert "admin" in out.roles

    def test_refuses_banned_account(self):
        banned = UserFactory(banned=True)
        with pytest.raises(BusinessRuleError):
            IdentityService().ensure_admin_account(banned.email, None)

    def test_new_account_needs_password(self):
        with pytest.raises(InvalidInputError):
            IdentityService().ensure_admin_account("nopw@example.com", None)
