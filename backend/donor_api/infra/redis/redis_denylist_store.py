"""Redis adapter for the refresh-token denylist shared by all workers."""

from __future__ import annotations

import math
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]


class RedisTokenDenylistStore:
    """
    Revoked refresh-token ``jti`` values as ``<prefix><jti>`` keys.

    Each key expires when the token it blocks would have expired, so the
    keyspace only ever holds revocations that still matter.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "deny:rt:") -> None:
        self.r = r
        self.prefix = prefix

    def _key(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    @staticmethod
    def _ttl(expires_at: datetime) -> int:
        # A token already past expiry still gets a one-second marker so a
        # racing refresh cannot slip through.
        remaining = (expires_at - datetime.now(UTC)).total_seconds()
        return max(1, math.ceil(remaining))

    def is_revoked(self, jti: str) -> bool:
        return bool(self.r.exists(self._key(jti)))

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        self.r.set(self._key(jti), "1", ex=self._ttl(expires_at))

    def claim_jti(self, *, jti: str, expires_at: datetime) -> bool:
        # SET NX answers None when the key already exists.
        return bool(self.r.set(self._key(jti), "1", ex=self._ttl(expires_at), nx=True))
