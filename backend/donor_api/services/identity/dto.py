"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety. None of them carries
the password hash.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from donor_api.models.user import User

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Input DTO for user registration.

    :param email: Login email (trimmed, case preserved).
    :type email: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    :param profile: Optional profile fields (``full_name``, ``phone``...).
    :type profile: dict[str, Any]
    """

    email: str
    password: str
    profile: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Input DTO for profile updates. Only keys present in ``changes`` are applied.

    :param changes: Field name -> new value.
    :type changes: dict[str, Any]
    """

    changes: dict[str, Any]


@dataclass(frozen=True, slots=True)
class UserPasswordChangeIn:
    """
    Input DTO for changing a user's password.

    :param user_id: Target user identifier.
    :type user_id: int
    :param new_password: New password (raw).
    :type new_password: str
    :param current_password: Required when users change their own password.
    :type current_password: str | None
    """

    user_id: int
    new_password: str
    current_password: str | None = None


@dataclass(frozen=True, slots=True)
class UserListFilters:
    status: str | None = None
    email: str | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    There is deliberately no hash field here: every outward representation
    of a user goes through this projection.
    """

    id: int
    email: str
    roles: list[str]
    status: str
    full_name: str | None
    phone: str | None
    gender: str | None
    date_of_birth: date | None
    blood_type: str | None
    address: str | None
    medical_history: str | None
    donation_count: int
    last_donation_date: datetime | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_model(cls, user: User) -> UserPublicOut:
        return cls(
            id=user.id,
            email=user.email,
            roles=sorted(role.value for role in user.roles),
            status=user.status.value,
            full_name=user.full_name,
            phone=user.phone,
            gender=user.gender.value if user.gender else None,
            date_of_birth=user.date_of_birth,
            blood_type=user.blood_type.value if user.blood_type else None,
            address=user.address,
            medical_history=user.medical_history,
            donation_count=user.donation_count,
            last_donation_date=user.last_donation_date,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
