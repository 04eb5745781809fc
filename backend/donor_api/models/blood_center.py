"""Blood center model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Float, Index, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column, validates

from donor_api.core.extensions import db

from .base import Entity

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class BloodCenter(Entity, db.Model):
    """
    A place donations are scheduled at.

    Archived centers stay readable but accept no new or redirected donations.

    Fields
    ------
    operating_hours : dict | None
        Weekday name -> ``{"open": "HH:MM", "close": "HH:MM"}``.
    current_donor_count : int
        Non-negative occupancy figure maintained by staff.
    """

    __tablename__ = "blood_centers"
    __repr_attr__ = "name"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    operating_hours: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    current_donor_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        Index("ix_blood_centers_archived", "archived"),
        CheckConstraint("current_donor_count >= 0", name="donor_count_non_negative"),
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="latitude_range"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="longitude_range"),
    )

    @validates("name", "address", "phone")
    def _strip_required(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()

    @validates("latitude")
    def _validate_latitude(self, key: str, value: float) -> float:
        if value is None or not -90 <= float(value) <= 90:
            raise ValueError("latitude must be between -90 and 90.")
        return float(value)

    @validates("longitude")
    def _validate_longitude(self, key: str, value: float) -> float:
        if value is None or not -180 <= float(value) <= 180:
            raise ValueError("longitude must be between -180 and 180.")
        return float(value)

    @validates("current_donor_count")
    def _validate_donor_count(self, key: str, value: int) -> int:
        if value is None or int(value) < 0:
            raise ValueError("current_donor_count must be >= 0.")
        return int(value)

    @validates("operating_hours")
    def _validate_operating_hours(
        self, key: str, value: dict[str, Any] | None
    ) -> dict[str, Any] | None:
        if value is None:
            return None
        unknown = set(value) - set(WEEKDAYS)
        if unknown:
            raise ValueError(f"Unknown weekdays in operating_hours: {sorted(unknown)}")
        return dict(value)
