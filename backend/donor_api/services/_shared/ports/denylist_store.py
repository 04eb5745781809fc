from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import Protocol


class TokenDenylistStore(Protocol):
    """
    Abstraction for a denylist of **refresh tokens** by JTI.

    Entries only need to outlive the token itself. ``revoke_jti`` is
    idempotent; ``claim_jti`` is the test-and-set used for rotation.
    """

    def is_revoked(self, jti: str) -> bool: ...
    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None: ...

    def claim_jti(self, *, jti: str, expires_at: datetime) -> bool:
        """Revoke ``jti`` only if it is not revoked yet, as one atomic step.

        :returns: ``True`` for the single caller that revoked it.
        """
        ...


class InMemoryDenylistStore(TokenDenylistStore):
    """Process-local denylist, used when no ``REDIS_URL`` is configured.

    Only suitable for a single worker process.
    """

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def is_revoked(self, jti: str) -> bool:
        now = datetime.now(UTC)
        with self._lock:
            expires_at = self._revoked.get(jti)
            if expires_at is None:
                return False
            if expires_at <= now:
                # The token can no longer verify; forget it.
                del self._revoked[jti]
                return False
            return True

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        with self._lock:
            self._revoked[jti] = expires_at

    def claim_jti(self, *, jti: str, expires_at: datetime) -> bool:
        now = datetime.now(UTC)
        with self._lock:
            current = self._revoked.get(jti)
            if current is not None and current > now:
                return False
            self._revoked[jti] = expires_at
            return True
