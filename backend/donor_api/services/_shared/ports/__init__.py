"""
donor_api.services._shared.ports
================================

*Ports* (hexagonal interfaces) that define the contracts for token
management infrastructure.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider` (signing and verification), plus the
    :class:`~.TokenKind` and :class:`~.TokenClaims` value types.

- :mod:`denylist_store`:
    Defines :class:`~.TokenDenylistStore` for refresh-token revocation and an
    in-process implementation.

Concrete adapters (PyJWT, Redis) live under ``donor_api.infra``.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .token_provider import TokenClaims, TokenKind, TokenProvider

__all__ = [
    "InMemoryDenylistStore",
    "TokenClaims",
    "TokenDenylistStore",
    "TokenKind",
    "TokenProvider",
]
