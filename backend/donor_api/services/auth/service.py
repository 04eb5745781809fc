# donor_api/services/auth/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from donor_api.models.user import User
from donor_api.repositories.user import UserRepository
from donor_api.services._shared.base import BaseService, ServiceContext
from donor_api.services._shared.dto import Principal
from donor_api.services._shared.errors import (
    AccountBannedError,
    AuthenticationError,
    InvalidCredentialsError,
    MissingTokenError,
    TokenExpiredError,
    TokenInvalidError,
    UnknownIdentityError,
)
from donor_api.services._shared.ports.denylist_store import TokenDenylistStore
from donor_api.services._shared.ports.token_provider import (
    TokenClaims,
    TokenKind,
    TokenProvider,
)
from donor_api.services.auth.dto import LoginIn, SessionOut, TokenPairOut
from donor_api.services.identity.dto import UserPublicOut

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GateMessages:
    """Client-facing messages for each terminal outcome of a gate."""

    missing: str
    expired: str
    invalid: str
    not_found: str
    banned: str


ACCESS_MESSAGES = GateMessages(
    missing="No token provided, authorization denied",
    expired="Token expired",
    invalid="Token is not valid",
    not_found="User not found, authorization denied",
    banned="Your account is banned",
)

REFRESH_MESSAGES = GateMessages(
    missing="Refresh token missing",
    expired="Refresh token expired",
    invalid="Invalid refresh token",
    not_found="User not found",
    banned="User is banned",
)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / gates / refresh / logout).

    Tokens are issued and verified through a pluggable :class:`TokenProvider`.
    Refresh tokens are single-use: rotation and logout put the presented
    token's ``jti`` on the :class:`TokenDenylistStore` until it expires.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        denylist_store: TokenDenylistStore,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/verifying JWTs.
        :param denylist_store: Revoked refresh-token JTIs.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.denylist = denylist_store

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :raises InvalidCredentialsError: Unknown email or wrong password
            (indistinguishable to the caller).
        :raises AccountBannedError: Correct credentials of a banned account.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.authenticate(dto.email, dto.password)
            if user is None:
                log.warning("auth.login_failed")
                raise InvalidCredentialsError()
            if user.is_banned:
                log.warning("auth.login_banned", extra={"user_id": user.id})
                raise AccountBannedError()
            user_out = UserPublicOut.from_model(user)

        tokens = self.tokens.issue_pair(user_out.id)
        log.info("auth.login", extra={"user_id": user_out.id})
        return SessionOut(tokens=tokens, user=user_out)

    # ------------------------------------------------------------------ #
    # Gates
    # ------------------------------------------------------------------ #

    def resolve_access(self, token: str | None) -> Principal:
        """
        Auth Gate: resolve the caller from an access token.

        Order is fixed: presence, signature/expiry (no store access on forged
        input), identity load, then the ban check.
        """
        claims = self._verify(token, TokenKind.ACCESS, ACCESS_MESSAGES)
        return self._load_principal(claims, ACCESS_MESSAGES)

    def resolve_refresh(self, token: str | None) -> tuple[Principal, TokenClaims]:
        """
        Refresh Gate: like :meth:`resolve_access` for refresh tokens, plus
        the denylist check right after verification.
        """
        claims = self._verify(token, TokenKind.REFRESH, REFRESH_MESSAGES)
        if self.denylist.is_revoked(claims.jti):
            log.warning("auth.refresh_reused", extra={"user_id": claims.subject})
            raise TokenInvalidError(REFRESH_MESSAGES.invalid)
        return self._load_principal(claims, REFRESH_MESSAGES), claims

    # ------------------------------------------------------------------ #
    # Refresh & logout
    # ------------------------------------------------------------------ #

    def refresh(self, principal: Principal, claims: TokenClaims) -> TokenPairOut:
        """
        Rotate: revoke the presented refresh token and issue a new pair.

        Expects the output of :meth:`resolve_refresh`. The gate's denylist
        lookup only rejects early; the claim here is what guarantees that
        concurrent refreshes with one token mint a single pair.

        :raises TokenInvalidError: The token was claimed by another refresh.
        """
        if not self.denylist.claim_jti(jti=claims.jti, expires_at=claims.expires_at):
            log.warning("auth.refresh_reused", extra={"user_id": principal.id})
            raise TokenInvalidError(REFRESH_MESSAGES.invalid)
        tokens = self.tokens.issue_pair(principal.id)
        log.info("auth.refresh", extra={"user_id": principal.id})
        return tokens

    def logout(self, refresh_token: str | None) -> None:
        """
        Revoke the refresh token carried by the request, if it still verifies.

        An absent, expired or invalid refresh token needs no revocation; the
        cookie is cleared by the caller either way.
        """
        actor_id = self.ctx.actor_id
        if refresh_token:
            try:
                claims = self.tokens.verify(refresh_token, TokenKind.REFRESH)
            except AuthenticationError as exc:
                log.info("auth.logout_skip_revoke: %s", exc, extra={"user_id": actor_id})
            else:
                self.denylist.revoke_jti(jti=claims.jti, expires_at=claims.expires_at)
        log.info("auth.logout", extra={"user_id": actor_id})

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _verify(self, token: str | None, kind: TokenKind, messages: GateMessages) -> TokenClaims:
        if not token:
            raise MissingTokenError(messages.missing)
        try:
            return self.tokens.verify(token, kind)
        except TokenExpiredError as exc:
            raise TokenExpiredError(messages.expired) from exc
        except TokenInvalidError as exc:
            raise TokenInvalidError(messages.invalid) from exc

    def _load_principal(self, claims: TokenClaims, messages: GateMessages) -> Principal:
        with self.ro_uow() as uow:
            user: User | None = uow.users.get(claims.subject)
            if user is None:
                raise UnknownIdentityError(messages.not_found)
            if user.is_banned:
                raise AccountBannedError(messages.banned)
            return Principal.from_user(user)
