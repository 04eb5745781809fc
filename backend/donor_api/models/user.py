"""User model: login identity, roles, account status and donor profile."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import CheckConstraint, Date, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from donor_api.core.extensions import db

from .base import Entity
from .types import EnumSet, UTCDateTime

if TYPE_CHECKING:
    from .donation import Donation


class Role(str, Enum):
    """Roles a user may hold. A user always holds at least one."""

    USER = "user"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    """Whether the identity may authenticate at all."""

    ACTIVE = "active"
    BANNED = "banned"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BloodType(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum *values* (``"active"``) rather than member names."""
    return [member.value for member in enum_cls]


DEFAULT_ROLES: frozenset[Role] = frozenset({Role.USER})


class User(Entity, db.Model):
    """
    Authentication identity plus the donor's descriptive profile.

    Fields
    ------
    email : str
        Login email. Surrounding whitespace is stripped; case is preserved
        and lookups are exact.
    password_hash : str
        Salted hash (write-only setter via ``password``). Never serialized.
    roles : frozenset[Role]
        Non-empty role set. Change it with :meth:`grant_role` and
        :meth:`revoke_role`.
    status : AccountStatus
        ``active`` or ``banned``. Admins can never be banned and banned
        users can never become admins.
    donation_count : int
        Completed donations. Only the donation lifecycle increments it.
    last_donation_date : datetime | None
        Instant of the latest completed donation.
    """

    __tablename__ = "users"
    __repr_attr__ = "email"

    # Credentials & authorization
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    roles: Mapped[frozenset[Role]] = mapped_column(EnumSet(Role), nullable=False)
    status: Mapped[AccountStatus] = mapped_column(
        SAEnum(
            AccountStatus,
            name="account_status",
            native_enum=False,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )

    # Profile (descriptive only)
    full_name: Mapped[str | None] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(32))
    gender: Mapped[Gender | None] = mapped_column(
        SAEnum(Gender, name="gender", native_enum=False, values_callable=_enum_values)
    )
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    blood_type: Mapped[BloodType | None] = mapped_column(
        SAEnum(BloodType, name="blood_type", native_enum=False, values_callable=_enum_values)
    )
    address: Mapped[str | None] = mapped_column(String(255))
    medical_history: Mapped[str | None] = mapped_column(Text)

    # Aggregates maintained by donation completion
    donation_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    last_donation_date: Mapped[datetime | None] = mapped_column(UTCDateTime())

    donations: Mapped[list[Donation]] = relationship(
        "Donation", back_populates="user", lazy="select"
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_status", "status"),
        CheckConstraint("donation_count >= 0", name="donation_count_non_negative"),
    )

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("roles", DEFAULT_ROLES)
        kwargs.setdefault("status", AccountStatus.ACTIVE)
        kwargs.setdefault("donation_count", 0)
        super().__init__(**kwargs)

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password. A fresh salt is generated on every call.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash (constant-time compare).

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        if not self.password_hash or not isinstance(raw, str):
            return False
        return bool(check_password_hash(self.password_hash, raw))

    # -------------------- Roles & status --------------------
    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in (self.roles or ())

    @property
    def is_banned(self) -> bool:
        return self.status == AccountStatus.BANNED

    def has_role(self, role: Role) -> bool:
        return role in (self.roles or ())

    def grant_role(self, role: Role) -> None:
        """Add ``role`` to the role set (no-op when already held)."""
        self.roles = frozenset(self.roles or ()) | {Role(role)}

    def revoke_role(self, role: Role) -> None:
        """Remove ``role``; an emptied set falls back to ``{user}``."""
        remaining = frozenset(self.roles or ()) - {Role(role)}
        self.roles = remaining or DEFAULT_ROLES

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Trim and sanity-check the email. Case is significant.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip()
        local, _, domain = v.partition("@")
        # Minimal sanity check; full validation happens at API layer.
        if not local or "." not in domain or domain.startswith(".") or domain.endswith("."):
            raise ValueError("Email format looks invalid.")
        return v

    @validates("roles")
    def _validate_roles(self, key: str, value: Any) -> frozenset[Role]:
        roles = frozenset(Role(r) for r in (value or ()))
        if not roles:
            raise ValueError("A user must hold at least one role.")
        if Role.ADMIN in roles and self.status == AccountStatus.BANNED:
            raise ValueError("A banned user cannot hold the admin role.")
        return roles

    @validates("status")
    def _validate_status(self, key: str, value: Any) -> AccountStatus:
        status = AccountStatus(value)
        if status == AccountStatus.BANNED and Role.ADMIN in (self.roles or ()):
            raise ValueError("An admin cannot be banned.")
        return status

    @validates("gender")
    def _validate_gender(self, key: str, value: Any) -> Gender | None:
        return Gender(value) if value is not None else None

    @validates("blood_type")
    def _validate_blood_type(self, key: str, value: Any) -> BloodType | None:
        return BloodType(value) if value is not None else None

    @validates("donation_count")
    def _validate_donation_count(self, key: str, value: int) -> int:
        if value is None or int(value) < 0:
            raise ValueError("donation_count must be >= 0.")
        return int(value)
