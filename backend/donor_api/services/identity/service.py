"""
IdentityService
===============

Aggregate service responsible for the `User` aggregate:
- Registration and password lifecycle
- Profile reads and updates (self or admin)
- Ban and admin-role toggles (admin only)
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from donor_api.models.user import AccountStatus, Role, User
from donor_api.repositories.user import UserRepository
from donor_api.services._shared.base import BaseService
from donor_api.services._shared.dto import PageMeta
from donor_api.services._shared.errors import (
    BusinessRuleError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    violates,
)
from donor_api.services._shared.policies.accounts import (
    next_roles_on_admin_toggle,
    next_status_on_ban_toggle,
)
from donor_api.services.identity.dto import (
    UserListFilters,
    UserPasswordChangeIn,
    UserPublicOut,
    UserRegisterIn,
    UserUpdateIn,
)

log = logging.getLogger(__name__)

EMAIL_TAKEN = "This email is already taken."


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate.

    Responsibilities
    ----------------
    - Register users ensuring email uniqueness.
    - Retrieve and update user profiles safely.
    - Manage password lifecycle.
    - Toggle account status and the admin role under the exclusivity rule.
    """

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register_user(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Register a new user with the default ``{user}`` role.

        :param dto: User registration input DTO.
        :type dto: UserRegisterIn
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises ConflictError: When the email is already registered.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_email(dto.email):
                raise ConflictError("User", EMAIL_TAKEN)

            try:
                user = repo.model(
                    email=dto.email,
                    password=dto.password,  # model hashes via setter
                    **dto.profile,
                )
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc

            try:
                repo.add(user)
            except IntegrityError as exc:
                # Lost a race against a concurrent registration
                if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                    raise ConflictError("User", EMAIL_TAKEN) from exc
                raise

            out = UserPublicOut.from_model(user)

        log.info("user.registered", extra={"user_id": out.id})
        return out

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserPublicOut:
        """
        Retrieve a user by identifier (self or admin).

        :raises AuthorizationError: If the caller is neither owner nor admin.
        :raises NotFoundError: If user does not exist.
        """
        self.ensure_owner_or_admin(user_id)
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserPublicOut.from_model(user)

    def list_users(
        self, filters: UserListFilters, *, page: int, limit: int, sort: list[str] | None = None
    ) -> tuple[list[UserPublicOut], PageMeta]:
        """Paginated user listing for admins."""
        self.ensure_admin()
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort)
        with self.ro_uow() as uow:
            result = uow.users.paginate(
                pagination,
                filters={"status": filters.status, "email": filters.email},
            )
            items = [UserPublicOut.from_model(u) for u in result.items]
        return items, PageMeta.from_page(result)

    # --------------------------------------------------------------------- #
    # Update profile
    # --------------------------------------------------------------------- #

    def update_profile(self, user_id: int, dto: UserUpdateIn) -> UserPublicOut:
        """
        Update whitelisted profile fields (self or admin).

        :raises AuthorizationError: If the caller is neither owner nor admin.
        :raises NotFoundError: When user not found.
        :raises ConflictError: When the new email belongs to someone else.
        :raises InvalidInputError: When there is nothing to update.
        """
        actor = self.ensure_owner_or_admin(user_id)
        if not dto.changes:
            raise InvalidInputError("No fields to update")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            new_email = dto.changes.get("email")
            if new_email is not None and repo.exists_by_email(new_email, exclude_id=user_id):
                raise ConflictError("User", EMAIL_TAKEN)

            try:
                repo.update(user, **dto.changes)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                    raise ConflictError("User", EMAIL_TAKEN) from exc
                raise

            out = UserPublicOut.from_model(user)

        log.info("user.profile_updated", extra={"user_id": user_id, "actor_id": actor.id})
        return out

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def change_password(self, dto: UserPasswordChangeIn) -> None:
        """
        Change a password. Users must confirm their current password; an
        admin may reset another user's password without it.

        :raises AuthorizationError: If the caller is neither owner nor admin.
        :raises NotFoundError: When user not found.
        :raises InvalidInputError: When the current password is missing or wrong.
        """
        actor = self.ensure_owner_or_admin(dto.user_id)
        is_self = actor.id == dto.user_id

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)

            if is_self:
                if not dto.current_password:
                    raise InvalidInputError("current_password is required")
                if not user.verify_password(dto.current_password):
                    raise InvalidInputError("Current password is incorrect")

            repo.update_password(user, dto.new_password)

        log.info("user.password_changed", extra={"user_id": dto.user_id, "actor_id": actor.id})

    # --------------------------------------------------------------------- #
    # Admin toggles
    # --------------------------------------------------------------------- #

    def toggle_ban(self, user_id: int) -> UserPublicOut:
        """
        Flip ``active``/``banned``.

        :raises BusinessRuleError: "Cannot ban an admin"; status is unchanged.
        """
        actor = self.ensure_admin()
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            user.status = next_status_on_ban_toggle(user.roles, user.status)
            uow.users.flush()
            out = UserPublicOut.from_model(user)

        log.info(
            "user.ban_toggled",
            extra={"user_id": user_id, "actor_id": actor.id, "status": out.status},
        )
        return out

    def toggle_admin(self, user_id: int) -> UserPublicOut:
        """
        Grant or revoke the admin role.

        :raises BusinessRuleError: "Cannot grant admin role to a banned user";
            roles are unchanged.
        """
        actor = self.ensure_admin()
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            target = next_roles_on_admin_toggle(user.roles, user.status)
            if Role.ADMIN in target:
                user.grant_role(Role.ADMIN)
            else:
                user.revoke_role(Role.ADMIN)
            uow.users.flush()
            out = UserPublicOut.from_model(user)

        log.info("user.admin_toggled", extra={"user_id": user_id, "actor_id": actor.id})
        return out

    # --------------------------------------------------------------------- #
    # Operations (CLI)
    # --------------------------------------------------------------------- #

    def ensure_admin_account(self, email: str, password: str | None) -> tuple[UserPublicOut, bool]:
        """
        Create an admin account, or promote an existing active one.

        Runs without a caller; only the CLI uses it.

        :returns: The admin and ``True`` when a new account was created.
        :raises BusinessRuleError: When the existing account is banned.
        :raises InvalidInputError: When creating without a password.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(email)
            created = user is None

            if user is None:
                if not password:
                    raise InvalidInputError("A password is required to create an account")
                try:
                    user = repo.add(
                        User(
                            email=email,
                            password=password,
                            roles=frozenset({Role.USER, Role.ADMIN}),
                        )
                    )
                except ValueError as exc:
                    raise InvalidInputError(str(exc)) from exc
            else:
                if user.status == AccountStatus.BANNED:
                    raise BusinessRuleError("Cannot grant admin role to a banned user")
                user.grant_role(Role.ADMIN)
                if password:
                    repo.update_password(user, password)
                repo.flush()

            out = UserPublicOut.from_model(user)

        log.info("user.admin_ensured", extra={"user_id": out.id})
        return out, created

