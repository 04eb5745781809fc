# donor_api/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from donor_api.services.identity.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (exact match).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Access and refresh tokens issued together.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param refresh_expires_at: Expiry of the refresh token (cookie lifetime).
    :type refresh_expires_at: datetime
    """

    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Result of a login or refresh: the token pair plus the user it belongs to.

    :param tokens: Newly issued pair.
    :type tokens: TokenPairOut
    :param user: Public view of the authenticated user.
    :type user: UserPublicOut
    """

    tokens: TokenPairOut
    user: UserPublicOut
