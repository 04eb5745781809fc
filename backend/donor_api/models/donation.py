"""Donation model and its status enumeration."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from donor_api.core.extensions import db

from .base import Entity
from .types import UTCDateTime

if TYPE_CHECKING:
    from .blood_center import BloodCenter
    from .user import User

NOTES_MAX_LENGTH = 500


class DonationStatus(str, Enum):
    """Lifecycle states. ``completed`` and ``canceled`` are terminal."""

    REQUESTED = "requested"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[DonationStatus] = frozenset(
    {DonationStatus.COMPLETED, DonationStatus.CANCELED}
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Donation(Entity, db.Model):
    """
    A donation requested by a user at a blood center.

    Fields
    ------
    status : DonationStatus
        Starts at ``requested``. Once terminal the row is immutable.
    scheduled_for : datetime
        Appointment instant (UTC).
    completed_at : datetime | None
        Stamped exactly once, on the transition into ``completed``.
    """

    __tablename__ = "donations"
    __repr_attr__ = "status"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    center_id: Mapped[int] = mapped_column(ForeignKey("blood_centers.id"), nullable=False)
    status: Mapped[DonationStatus] = mapped_column(
        SAEnum(
            DonationStatus,
            name="donation_status",
            native_enum=False,
            values_callable=lambda enum_cls: [m.value for m in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=DonationStatus.REQUESTED,
    )
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=_utcnow)
    scheduled_for: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    notes: Mapped[str | None] = mapped_column(String(NOTES_MAX_LENGTH))

    user: Mapped[User] = relationship("User", back_populates="donations", lazy="select")
    center: Mapped[BloodCenter] = relationship("BloodCenter", lazy="selectin")

    __table_args__ = (
        Index("ix_donations_user_id", "user_id"),
        Index("ix_donations_center_id", "center_id"),
        Index("ix_donations_status", "status"),
    )

    @property
    def is_terminal(self) -> bool:
        return DonationStatus(self.status).is_terminal

    @validates("notes")
    def _validate_notes(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        if len(value) > NOTES_MAX_LENGTH:
            raise ValueError(f"notes must be at most {NOTES_MAX_LENGTH} characters.")
        return value
