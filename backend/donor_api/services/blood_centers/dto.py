"""DTOs for BloodCenterService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from donor_api.models.blood_center import BloodCenter


@dataclass(frozen=True, slots=True)
class BloodCenterCreateIn:
    name: str
    address: str
    phone: str
    latitude: float
    longitude: float
    operating_hours: dict[str, Any] | None = None
    current_donor_count: int = 0


@dataclass(frozen=True, slots=True)
class BloodCenterOut:
    """
    Public view of a blood center.

    :param archived: Archived centers accept no new or redirected donations.
    :type archived: bool
    """

    id: int
    name: str
    address: str
    phone: str
    latitude: float
    longitude: float
    operating_hours: dict[str, Any] | None
    current_donor_count: int
    archived: bool
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_model(cls, center: BloodCenter) -> BloodCenterOut:
        return cls(
            id=center.id,
            name=center.name,
            address=center.address,
            phone=center.phone,
            latitude=center.latitude,
            longitude=center.longitude,
            operating_hours=center.operating_hours,
            current_donor_count=center.current_donor_count,
            archived=bool(center.archived),
            created_at=center.created_at,
            updated_at=center.updated_at,
        )
