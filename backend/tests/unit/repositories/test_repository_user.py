"""Tests for UserRepository."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from donor_api.models.user import AccountStatus
from donor_api.repositories.base import Pagination
from donor_api.repositories.user import UserRepository
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


@pytest.fixture()
def repo(session) -> UserRepository:
    return UserRepository(session=session)


class TestLookups:
    def test_get_by_email_is_exact(self, repo):
        u = UserFactory(email="Case@Example.com")
        assert repo.get_by_email("Case@Example.com") is u
        assert repo.get_by_email("  Case@Example.com ") is u
        assert repo.get_by_email("case@example.com") is None

    def test_exists_by_email_excluding_self(self, repo):
        u = UserFactory(email="taken@example.com")
        assert repo.exists_by_email("taken@example.com")
        assert not repo.exists_by_email("taken@example.com", exclude_id=u.id)

    def test_authenticate(self, repo):
        u = UserFactory()
        assert repo.authenticate(u.email, DEFAULT_PASSWORD) is u
        assert repo.authenticate(u.email, "nope") is None
        assert repo.authenticate("ghost@example.com", DEFAULT_PASSWORD) is None


class TestUpdates:
    def test_update_whitelisted_fields(self, repo):
        u = UserFactory()
        repo.update(u, full_name="Ada Lovelace", phone="+34600000000")
        assert u.full_name == "Ada Lovelace"

    def test_update_rejects_non_whitelisted_fields(self, repo):
        u = UserFactory()
        with pytest.raises(ValueError):
            repo.update(u, roles={"admin"})
        with pytest.raises(ValueError):
            repo.update(u, donation_count=99)

    def test_update_password_rehashes(self, repo):
        u = UserFactory()
        old_hash = u.password_hash
        repo.update_password(u, "fresh-secret")
        assert u.password_hash != old_hash
        assert u.verify_password("fresh-secret")

    def test_record_completed_donation_increments_in_sql(self, repo, session):
        u = UserFactory()
        when = datetime(2026, 5, 1, 10, 30, tzinfo=UTC)

        assert repo.record_completed_donation(u.id, when) == 1
        assert repo.record_completed_donation(u.id, when) == 1
        repo.refresh(u)

        assert u.donation_count == 2
        assert u.last_donation_date == when

    def test_record_completed_donation_unknown_user(self, repo):
        assert repo.record_completed_donation(987654, datetime.now(UTC)) == 0


class TestListing:
    def test_paginate_with_status_filter(self, repo):
        UserFactory.create_batch(3)
        UserFactory(banned=True)

        page = repo.paginate(
            Pagination(page=1, limit=2, sort=["email"]),
            filters={"status": AccountStatus.ACTIVE},
        )

        assert page.total == 3
        assert len(page.items) == 2
        assert [u.email for u in page.items] == sorted(u.email for u in page.items)

    def test_unknown_sort_and_filter_keys_are_ignored(self, repo):
        UserFactory.create_batch(2)
        page = repo.paginate(
            Pagination(page=1, limit=10, sort=["password_hash"]),
            filters={"password_hash": "x"},
        )
        assert page.total == 2
