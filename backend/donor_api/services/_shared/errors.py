"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the stable contract between repositories, policies, token
providers and application services.

The translation to HTTP responses (RFC 7807) is handled by
``donor_api/core/errors.py``.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError message mentions the constraint. SQLite
        reports the column instead, so ``users.email`` style names also match.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, policies or domain logic.
    """

    def __init__(self, message: str = "Service error") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """The caller could not be authenticated."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class MissingTokenError(AuthenticationError):
    """No token was presented on the expected carrier."""

    def __init__(self, message: str = "No token provided") -> None:
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    """Signature is valid but ``exp`` is in the past."""

    def __init__(self, message: str = "Token expired") -> None:
        super().__init__(message)


class TokenInvalidError(AuthenticationError):
    """Malformed token, bad signature, missing claims or revoked token."""

    def __init__(self, message: str = "Token is not valid") -> None:
        super().__init__(message)


class TokenWrongKindError(TokenInvalidError):
    """A well-formed token of the other kind (access vs refresh)."""

    def __init__(self, message: str = "Wrong token type") -> None:
        super().__init__(message)


class UnknownIdentityError(AuthenticationError):
    """The token references an identity that no longer exists."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair did not match."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class AccountBannedError(ServiceError):
    """Authenticated identity is banned."""

    def __init__(self, message: str = "Your account is banned") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Authorization & business rules
# --------------------------------------------------------------------------- #


class AuthorizationError(ServiceError):
    """Authenticated but lacking the role or ownership required."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class BusinessRuleError(ServiceError):
    """A domain rule forbids the operation (ban an admin, archived center...)."""


class ImmutableStateError(ServiceError):
    """The resource is in a terminal state and cannot change."""


class InvalidInputError(ServiceError):
    """Input passed schema validation but is semantically invalid."""


# --------------------------------------------------------------------------- #
# Persistence-flavoured errors
# --------------------------------------------------------------------------- #


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    def __init__(self, entity: str, key: str | int) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.key = key


class ConflictError(ServiceError):
    """
    Raised when a unique constraint conflict occurs (e.g. duplicate email).

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    def __init__(self, entity: str, detail: str) -> None:
        super().__init__(detail)
        self.entity = entity
        self.detail = detail
