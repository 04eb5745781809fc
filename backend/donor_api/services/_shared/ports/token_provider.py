from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from donor_api.services.auth.dto import TokenPairOut


class TokenKind(str, Enum):
    """The two token classes; each is signed with its own key."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims of a token.

    :param subject: User identifier the token was issued for.
    :param kind: Access or refresh.
    :param jti: Unique token identifier (denylist key).
    :param issued_at: ``iat`` as an aware UTC datetime.
    :param expires_at: ``exp`` as an aware UTC datetime.
    """

    subject: int
    kind: TokenKind
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenProvider(Protocol):
    """Port for issuing and verifying signed tokens."""

    def issue(self, subject: int, kind: TokenKind) -> str:
        """Sign a new token of ``kind`` for ``subject``."""

    def issue_pair(self, subject: int) -> TokenPairOut:
        """Sign a fresh access/refresh pair for ``subject``."""

    def verify(self, token: str, expected_kind: TokenKind) -> TokenClaims:
        """
        Check signature, expiry and kind.

        :raises TokenExpiredError: Signature valid, ``exp`` in the past.
        :raises TokenWrongKindError: Valid token of the other kind.
        :raises TokenInvalidError: Anything else (malformed, bad signature...).
        """
