"""Tests for the Donation model and its status enum."""

from __future__ import annotations

import pytest

from donor_api.models.donation import NOTES_MAX_LENGTH, TERMINAL_STATUSES, DonationStatus
from tests.factories.donation import DonationFactory


class TestDonationStatus:
    def test_terminal_states(self):
        assert TERMINAL_STATUSES == {DonationStatus.COMPLETED, DonationStatus.CANCELED}
        assert DonationStatus.COMPLETED.is_terminal
        assert DonationStatus.CANCELED.is_terminal
        assert not DonationStatus.REQUESTED.is_terminal
        assert not DonationStatus.CONFIRMED.is_terminal


class TestDonation:
    def test_persisted_with_relationships(self, session):
        d = DonationFactory()
        session.commit()
        session.expire_all()

        assert d.status == DonationStatus.REQUESTED
        assert d.completed_at is None
        assert d.user.donations == [d]
        assert d.center.id == d.center_id
        assert d.requested_at.tzinfo is not None
        assert d.scheduled_for.tzinfo is not None

    def test_is_terminal_property(self, session):
        d = DonationFactory(status=DonationStatus.CANCELED)
        assert d.is_terminal

    def test_notes_length_limit(self, session):
        d = DonationFactory()
        d.notes = "x" * NOTES_MAX_LENGTH
        with pytest.raises(ValueError):
            d.notes = "x" * (NOTES_MAX_LENGTH + 1)
