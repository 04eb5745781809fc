# donor_api/infra/jwt/jwt_token_provider.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from donor_api.services._shared.errors import (
    TokenExpiredError,
    TokenInvalidError,
    TokenWrongKindError,
)
from donor_api.services._shared.ports.token_provider import TokenClaims, TokenKind
from donor_api.services.auth.dto import TokenPairOut

REQUIRED_CLAIMS = ["sub", "type", "jti", "iat", "exp"]


@dataclass(frozen=True, slots=True)
class JWTTokenProvider:
    """
    PyJWT adapter with one HMAC key per token kind.

    Keys, lifetimes, algorithm and leeway are fixed at construction; the
    instance never reads configuration or globals afterwards, so tests can
    build one with deterministic keys.

    :param access_secret: Signing key for access tokens.
    :param refresh_secret: Signing key for refresh tokens. Must differ from
        ``access_secret`` so a leak of one cannot forge the other class.
    :param access_ttl: Access token lifetime.
    :param refresh_ttl: Refresh token lifetime.
    :param algorithm: HMAC algorithm (``HS256`` by default).
    :param leeway: Clock skew tolerated on ``exp``. Zero disables it.
    """

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(hours=24)
    algorithm: str = "HS256"
    leeway: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both JWT signing secrets must be configured.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh tokens must use different signing secrets.")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> JWTTokenProvider:
        """Build a provider from a Flask config mapping."""
        return cls(
            access_secret=config.get("JWT_ACCESS_SECRET") or "",
            refresh_secret=config.get("JWT_REFRESH_SECRET") or "",
            access_ttl=timedelta(minutes=int(config.get("JWT_ACCESS_EXPIRES_MINUTES", 15))),
            refresh_ttl=timedelta(hours=int(config.get("JWT_REFRESH_EXPIRES_HOURS", 24))),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            leeway=timedelta(seconds=int(config.get("JWT_LEEWAY_SECONDS", 0))),
        )

    # ------------------------------------------------------------------ #
    # Issuing
    # ------------------------------------------------------------------ #

    def _secret_for(self, kind: TokenKind) -> str:
        return self.access_secret if kind == TokenKind.ACCESS else self.refresh_secret

    def _ttl_for(self, kind: TokenKind) -> timedelta:
        return self.access_ttl if kind == TokenKind.ACCESS else self.refresh_ttl

    def issue(self, subject: int, kind: TokenKind) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(subject),
            "type": kind.value,
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + self._ttl_for(kind),
        }
        return jwt.encode(payload, self._secret_for(kind), algorithm=self.algorithm)

    def issue_pair(self, subject: int) -> TokenPairOut:
        refresh = self.issue(subject, TokenKind.REFRESH)
        return TokenPairOut(
            access_token=self.issue(subject, TokenKind.ACCESS),
            refresh_token=refresh,
            refresh_expires_at=self.verify(refresh, TokenKind.REFRESH).expires_at,
        )

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify(self, token: str, expected_kind: TokenKind) -> TokenClaims:
        """
        Decode with the key of ``expected_kind`` and validate the claims.

        A token of the other kind fails the signature check first (different
        key); the ``type`` comparison is a second line for misconfigured
        deployments.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_for(expected_kind),
                algorithms=[self.algorithm],
                leeway=self.leeway,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc

        if payload.get("type") != expected_kind.value:
            raise TokenWrongKindError()

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.isdigit():
            raise TokenInvalidError()

        return TokenClaims(
            subject=int(subject),
            kind=expected_kind,
            jti=str(payload["jti"]),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
        )
