"""User repository: lookups, credential checks and donation aggregates."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select

from donor_api.models.user import User
from donor_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never handles tokens or sessions; only DB-level user management.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "full_name": User.full_name,
            "donation_count": User.donation_count,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {
            "email": User.email,
            "status": User.status,
        }

    def _updatable_fields(self):
        """Profile fields a caller may change (never password, roles or status)."""
        return {
            "email",
            "full_name",
            "phone",
            "gender",
            "date_of_birth",
            "blood_type",
            "address",
            "medical_history",
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by exact email (surrounding whitespace ignored).

        :param email: Email address to search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.strip())
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` when another user already owns ``email``."""
        stmt = select(User.id).where(User.email == email.strip())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Credential ops ----------------------------

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when ``email``/``password`` match, else ``None``."""
        user = self.get_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user

    def update_password(self, user: User, new_password: str) -> None:
        """Re-hash and store a new password (fresh salt) and flush."""
        user.password = new_password  # invokes setter → hash
        self.flush()

    # ---------------------------- Donation aggregates ----------------------------

    def record_completed_donation(self, user_id: int, completed_at: datetime) -> int:
        """Increment ``donation_count`` and stamp ``last_donation_date`` atomically.

        The increment is evaluated by the database (``count = count + 1``),
        so concurrent completions for the same donor never lose an update.

        :returns: Rows updated (``0`` when the user does not exist).
        :rtype: int
        """
        return self.update_where(
            user_id,
            {
                "donation_count": User.donation_count + 1,
                "last_donation_date": completed_at,
            },
        )
