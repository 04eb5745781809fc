"""Settings classes selected by ``APP_ENV`` and overridable from the environment.

A ``.env`` file in the working directory is loaded first, when present.
Signing keys have development defaults only; production reads them from the
environment and refuses to start without them.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"
TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in TRUTHY


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Not used for token signing.
    JWT_ACCESS_SECRET: str
        HMAC key for access tokens. Must differ from ``JWT_REFRESH_SECRET``.
    JWT_REFRESH_SECRET: str
        HMAC key for refresh tokens.
    JWT_ACCESS_EXPIRES_MINUTES: int
        Access token lifetime in minutes.
    JWT_REFRESH_EXPIRES_HOURS: int
        Refresh token lifetime in hours (also the refresh cookie ``Max-Age``).
    JWT_ALGORITHM: str
        HMAC algorithm passed to PyJWT.
    JWT_LEEWAY_SECONDS: int
        Clock skew tolerated on ``exp``. Zero means no grace window.
    REFRESH_COOKIE_NAME: str
        Cookie carrying the refresh token.
    REFRESH_COOKIE_SECURE: bool
        Restrict the refresh cookie to HTTPS.
    REFRESH_COOKIE_SAMESITE: str
        ``SameSite`` attribute for the refresh cookie.
    REDIS_URL: str | None
        Enables the shared Redis token denylist when set.
    REDIS_DENYLIST_PREFIX: str
        Key prefix for revoked refresh-token ids in Redis.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    PAGINATION_DEFAULT_LIMIT: int
        Page size used when ``limit`` is omitted.
    PAGINATION_MAX_LIMIT: int
        Upper bound applied to ``limit``.

    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "CHANGE_ME_ACCESS_SIGNING_KEY_0000000")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH_SIGNING_KEY_000000")
    JWT_ACCESS_EXPIRES_MINUTES = env_int("JWT_ACCESS_EXPIRES_MINUTES", 15)
    JWT_REFRESH_EXPIRES_HOURS = env_int("JWT_REFRESH_EXPIRES_HOURS", 24)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_LEEWAY_SECONDS = env_int("JWT_LEEWAY_SECONDS", 0)

    # Refresh cookie
    REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refreshToken")
    REFRESH_COOKIE_SECURE = env_bool("REFRESH_COOKIE_SECURE", True)
    REFRESH_COOKIE_SAMESITE = os.getenv("REFRESH_COOKIE_SAMESITE", "Strict")

    # Token denylist backend (in-process when unset)
    REDIS_URL = os.getenv("REDIS_URL") or None
    REDIS_DENYLIST_PREFIX = os.getenv("REDIS_DENYLIST_PREFIX", "deny:rt:")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = env_int("PROXYFIX_HOPS", 1)

    # Pagination
    PAGINATION_DEFAULT_LIMIT = 10
    PAGINATION_MAX_LIMIT = 100

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Debug on; the refresh cookie also travels over plain HTTP on localhost."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    REFRESH_COOKIE_SECURE = env_bool("REFRESH_COOKIE_SECURE", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """In-memory SQLite (or ``TEST_DATABASE_URL``), fixed keys, no Redis."""

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_ACCESS_SECRET = "test-access-signing-key-0123456789abcdef"
    JWT_REFRESH_SECRET = "test-refresh-signing-key-0123456789abcdef"
    REFRESH_COOKIE_SECURE = False
    REDIS_URL = None
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """HTTPS-only refresh cookie and signing keys taken from the environment.

    Missing keys resolve to empty strings, which the token provider rejects
    when the app is created.
    """

    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "")
    SQLALCHEMY_ECHO = False
    REFRESH_COOKIE_SECURE = True


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config(name: str | None = None) -> type[BaseConfig]:
    """Config class for ``name``, else ``$APP_ENV``; unknown names mean development."""
    key = (name or os.getenv(ENV_VAR, "development")).strip().lower()
    return CONFIG_MAP.get(key, DevelopmentConfig)
