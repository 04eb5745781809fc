"""Tests for DonationService: requests, reads and the completion path."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import update

from donor_api.models.donation import Donation, DonationStatus
from donor_api.models.user import User
from donor_api.repositories.user import UserRepository
from donor_api.services._shared.base import ServiceContext
from donor_api.services._shared.dto import Principal
from donor_api.services._shared.errors import (
    AuthorizationError,
    BusinessRuleError,
    ImmutableStateError,
    InvalidInputError,
    NotFoundError,
)
from donor_api.services.donations.dto import DonationCreateIn, DonationListFilters
from donor_api.services.donations.service import VIEW_FORBIDDEN, DonationService
from tests.factories.blood_center import BloodCenterFactory
from tests.factories.donation import DonationFactory
from tests.factories.user import UserFactory


def service_for(user) -> DonationService:
    return DonationService(ctx=ServiceContext(actor=Principal.from_user(user)))


def _later(days: int = 2) -> datetime:
    return datetime.now(UTC) + timedelta(days=days)


class TestCreate:
    def test_request_is_always_requested_and_owned_by_caller(self):
        donor = UserFactory()
        center = BloodCenterFactory()

        out = service_for(donor).create_donation(
            DonationCreateIn(center_id=center.id, scheduled_for=_later(), notes="first time")
        )

        assert out.status == "requested"
        assert out.user_id == donor.id
        assert out.center_id == center.id
        assert out.center_name == center.name
        assert out.completed_at is None

    def test_archived_center_rejected(self):
        donor = UserFactory()
        center = BloodCenterFactory(archived=True)
        with pytest.raises(BusinessRuleError):
            service_for(donor).create_donation(
                DonationCreateIn(center_id=center.id, scheduled_for=_later())
            )

    def test_unknown_center_rejected(self):
        with pytest.raises(NotFoundError, match="Blood center not found"):
            service_for(UserFactory()).create_donation(
                DonationCreateIn(center_id=55555, scheduled_for=_later())
            )

    def test_past_schedule_rejected(self):
        center = BloodCenterFactory()
        with pytest.raises(InvalidInputError):
            service_for(UserFactory()).create_donation(
                DonationCreateIn(center_id=center.id, scheduled_for=_later(-1))
            )


class TestReads:
    def test_owner_other_admin(self):
        donation = DonationFactory()
        other = UserFactory()
        admin = UserFactory(admin=True)

        assert service_for(donation.user).get_donation(donation.id).id == donation.id
        with pytest.raises(AuthorizationError, match=VIEW_FORBIDDEN):
            service_for(other).get_donation(donation.id)
        assert service_for(admin).get_donation(donation.id).id == donation.id

    def test_missing_donation(self):
        with pytest.raises(NotFoundError, match="Donation not found"):
            service_for(UserFactory()).get_donation(8080)

    def test_list_my_donations_only_returns_own(self):
        donor = UserFactory()
        DonationFactory.create_batch(2, user=donor)
        DonationFactory()

        items, meta = service_for(donor).list_my_donations(page=1, limit=10)

        assert meta.total == 2
        assert {d.user_id for d in items} == {donor.id}

    def test_list_all_is_admin_only(self):
        DonationFactory(status=DonationStatus.CONFIRMED)
        DonationFactory()
        admin = UserFactory(admin=True)

        items, meta = service_for(admin).list_donations(
            DonationListFilters(status=DonationStatus.CONFIRMED), page=1, limit=10
        )
        assert meta.total == 1
        assert items[0].status == "confirmed"

        with pytest.raises(AuthorizationError):
            service_for(UserFactory()).list_donations(DonationListFilters(), page=1, limit=10)


class TestCompletion:
    def test_completion_stamps_and_counts_once(self, session):
        admin = UserFactory(admin=True)
        donation = DonationFactory(status=DonationStatus.CONFIRMED)
        donor_id = donation.user_id
        session.commit()
        svc = service_for(admin)

        out = svc.update_donation(donation.id, {"status": DonationStatus.COMPLETED})

        assert out.status == "completed"
        assert out.completed_at is not None
        donor = UserRepository(session=session).get(donor_id)
        session.refresh(donor)
        assert donor.donation_count == 1
        assert donor.last_donation_date is not None

        with pytest.raises(ImmutableStateError):
            svc.update_donation(donation.id, {"status": DonationStatus.COMPLETED})
        session.refresh(donor)
        assert donor.donation_count == 1

    def test_lost_completion_race_rolls_back_without_counting(self, session):
        admin = UserFactory(admin=True)
        donation = DonationFactory(status=DonationStatus.CONFIRMED)
        donor_id = donation.user_id
        session.commit()
        # Another writer completes the row behind the loaded instance's back.
        session.execute(
            update(Donation)
            .where(Donation.id == donation.id)
            .values(status=DonationStatus.COMPLETED, completed_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        session.commit()
        assert donation.status == DonationStatus.CONFIRMED

        with pytest.raises(ImmutableStateError, match="already finalized"):
            service_for(admin).update_donation(donation.id, {"status": DonationStatus.COMPLETED})

        donor = session.get(User, donor_id)
        session.refresh(donor)
        assert donor.donation_count == 0
        assert donor.last_donation_date is None

    def test_updates_after_cancel_are_rejected(self, session):
        admin = UserFactory(admin=True)
        donation = DonationFactory(status=DonationStatus.CANCELED)
        session.commit()

        with pytest.raises(ImmutableStateError):
            service_for(admin).update_donation(donation.id, {"notes": "too late"})

    def test_redirect_to_archived_center_rejected(self, session):
        admin = UserFactory(admin=True)
        donation = DonationFactory()
        archived = BloodCenterFactory(archived=True)
        session.commit()

        with pytest.raises(BusinessRuleError):
            service_for(admin).update_donation(donation.id, {"center_id": archived.id})

    def test_current_center_is_revalidated(self, session):
        admin = UserFactory(admin=True)
        donation = DonationFactory()
        donation.center.archived = True
        session.commit()

        with pytest.raises(BusinessRuleError):
            service_for(admin).update_donation(donation.id, {"status": DonationStatus.CONFIRMED})

    def test_non_admin_cannot_update(self):
        donation = DonationFactory()
        with pytest.raises(AuthorizationError):
            service_for(donation.user).update_donation(donation.id, {"notes": "mine"})
