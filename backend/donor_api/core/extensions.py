"""Extension singletons and the auth adapters bound to each app.

``db`` and ``migrate`` are created at import time and bound in
:func:`init_app`. The token provider and the refresh-token denylist are built
per application from its config and kept in ``app.extensions``; request code
reaches them through :func:`get_token_provider` and :func:`get_denylist`.
"""

from __future__ import annotations

from typing import cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

from donor_api.services._shared.ports import InMemoryDenylistStore, TokenDenylistStore, TokenProvider

TOKEN_PROVIDER_KEY = "token_provider"
DENYLIST_KEY = "token_denylist"

# Constraint names are stable so migrations can refer to them.
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)


def _build_denylist(app: Flask) -> TokenDenylistStore:
    """Redis-backed when ``REDIS_URL`` is set, otherwise process-local."""
    url = app.config.get("REDIS_URL")
    if not url:
        app.logger.warning("denylist.in_memory: refresh revocations are per-process")
        return InMemoryDenylistStore()

    from donor_api.infra.redis.redis_denylist_store import RedisTokenDenylistStore

    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    return RedisTokenDenylistStore(client, prefix=app.config.get("REDIS_DENYLIST_PREFIX", "deny:rt:"))


def init_app(app: Flask) -> None:
    """Bind the database, migrations and auth adapters to ``app``.

    Raises ``ValueError`` when the JWT secrets are missing or identical, and
    ``RuntimeError`` when a configured Redis is unreachable, so a
    misconfigured deployment fails at startup.
    """
    db.init_app(app)

    # Models must be imported for Alembic autogenerate to see the tables.
    from donor_api import models  # noqa: F401
    from donor_api.infra.jwt.jwt_token_provider import JWTTokenProvider

    migrate.init_app(app, db)
    app.extensions[TOKEN_PROVIDER_KEY] = JWTTokenProvider.from_config(app.config)
    app.extensions[DENYLIST_KEY] = _build_denylist(app)


def get_token_provider() -> TokenProvider:
    return cast(TokenProvider, current_app.extensions[TOKEN_PROVIDER_KEY])


def get_denylist() -> TokenDenylistStore:
    return cast(TokenDenylistStore, current_app.extensions[DENYLIST_KEY])
