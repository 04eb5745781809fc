# donor_api/services/_shared/base.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from donor_api.repositories.base import Pagination
from donor_api.services._shared.dto import Principal
from donor_api.services._shared.errors import AuthenticationError, AuthorizationError
from donor_api.services._shared.policies.common import is_owner_or_admin
from donor_api.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (caller identity, request id).

    :param actor: Principal resolved by the auth gate, if any.
    :param request_id: Correlation id for logging/tracing.
    """

    actor: Principal | None = None
    request_id: str | None = None

    @property
    def actor_id(self) -> int | None:
        return self.actor.id if self.actor else None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared validation helpers (pagination/sorting).
    * Centralize the caller checks reused by every service.

    Notes
    -----
    - Services never touch the global session directly; they use a Unit of Work.
    - Errors raised here are service errors; HTTP translation lives in
      ``donor_api.core.errors``.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (caller, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Create a read-write Unit of Work."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Create a read-only Unit of Work."""
        return SQLAlchemyReadOnlyUnitOfWork()

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self,
        *,
        page: int,
        limit: int,
        sort: Iterable[str] | None = None,
        default_sort: Iterable[str] = ("-created_at",),
    ) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number.
        :param limit: Page size.
        :param sort: Sort tokens like ``["-created_at", "name"]``.
        :param default_sort: Tokens used when ``sort`` is empty.
        :returns: Pagination instance.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = max(1, int(limit))
        tokens = list(sort or []) or list(default_sort)
        return Pagination(page=page, limit=limit, sort=tokens)

    # --------------------------- AuthZ --------------------------------

    def require_actor(self) -> Principal:
        """
        Return the resolved caller.

        :raises AuthenticationError: If the service runs without a caller.
        """
        if self.ctx.actor is None:
            raise AuthenticationError("Unauthorized")
        return self.ctx.actor

    def ensure_admin(self, *, msg: str | None = None) -> Principal:
        """
        Ensure the caller holds the admin role.

        :raises AuthorizationError: If the caller is not an admin.
        """
        actor = self.require_actor()
        if not actor.is_admin:
            raise AuthorizationError(msg or "Forbidden")
        return actor

    def ensure_owner_or_admin(self, owner_id: int, *, msg: str | None = None) -> Principal:
        """
        Ensure the caller owns the resource or holds the admin role.

        :param owner_id: Identifier of the resource owner.
        :param msg: Optional custom error message.
        :raises AuthorizationError: If neither condition holds.
        """
        actor = self.require_actor()
        if not is_owner_or_admin(actor_id=actor.id, actor_roles=actor.roles, owner_id=owner_id):
            raise AuthorizationError(msg or "Forbidden")
        return actor

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
