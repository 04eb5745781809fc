from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from donor_api.infra.jwt.jwt_token_provider import JWTTokenProvider
from donor_api.services._shared.errors import (
    TokenExpiredError,
    TokenInvalidError,
    TokenWrongKindError,
)
from donor_api.services._shared.ports import TokenKind

ACCESS_KEY = "access-key-for-tests-0000000000000"
REFRESH_KEY = "refresh-key-for-tests-000000000000"


@pytest.fixture()
def provider() -> JWTTokenProvider:
    return JWTTokenProvider(access_secret=ACCESS_KEY, refresh_secret=REFRESH_KEY)


def test_issue_and_verify_access(provider):
    claims = provider.verify(provider.issue(42, TokenKind.ACCESS), TokenKind.ACCESS)

    assert claims.subject == 42
    assert claims.kind is TokenKind.ACCESS
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)


def test_pair_has_distinct_ids_and_cookie_expiry(provider):
    pair = provider.issue_pair(7)

    access = provider.verify(pair.access_token, TokenKind.ACCESS)
    refresh = provider.verify(pair.refresh_token, TokenKind.REFRESH)
    assert access.jti != refresh.jti
    assert pair.refresh_expires_at == refresh.expires_at
    assert refresh.expires_at - refresh.issued_at == timedelta(hours=24)


@pytest.mark.parametrize(
    "issued, expected",
    [(TokenKind.ACCESS, TokenKind.REFRESH), (TokenKind.REFRESH, TokenKind.ACCESS)],
)
def test_tokens_do_not_cross_kinds(provider, issued, expected):
    with pytest.raises(TokenInvalidError):
        provider.verify(provider.issue(1, issued), expected)


def test_type_claim_checked_when_keys_collide_at_verification(provider):
    # Correctly signed with the access key but claiming to be a refresh token.
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "1", "type": "refresh", "jti": "x", "iat": now, "exp": now + timedelta(minutes=1)},
        ACCESS_KEY,
        algorithm="HS256",
    )
    with pytest.raises(TokenWrongKindError):
        provider.verify(token, TokenKind.ACCESS)


def test_expiry(provider):
    with freeze_time("2026-03-01 12:00:00"):
        token = provider.issue(1, TokenKind.ACCESS)
    with freeze_time("2026-03-01 12:14:59"):
        assert provider.verify(token, TokenKind.ACCESS).subject == 1
    with freeze_time("2026-03-01 12:15:01"), pytest.raises(TokenExpiredError):
        provider.verify(token, TokenKind.ACCESS)


def test_tampered_token_rejected(provider):
    token = provider.issue(1, TokenKind.ACCESS)
    head, payload, sig = token.split(".")
    forged = ".".join([head, payload, sig[:-2] + ("AA" if sig[-2:] != "AA" else "BB")])
    with pytest.raises(TokenInvalidError):
        provider.verify(forged, TokenKind.ACCESS)


def test_non_numeric_subject_rejected(provider):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "abc", "type": "access", "jti": "x", "iat": now, "exp": now + timedelta(minutes=1)},
        ACCESS_KEY,
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError):
        provider.verify(token, TokenKind.ACCESS)


@pytest.mark.parametrize(
    "access, refresh",
    [("same-secret", "same-secret"), ("", REFRESH_KEY), (ACCESS_KEY, "")],
)
def test_secrets_must_be_present_and_distinct(access, refresh):
    with pytest.raises(ValueError):
        JWTTokenProvider(access_secret=access, refresh_secret=refresh)


def test_from_config_reads_lifetimes():
    provider = JWTTokenProvider.from_config(
        {
            "JWT_ACCESS_SECRET": ACCESS_KEY,
            "JWT_REFRESH_SECRET": REFRESH_KEY,
            "JWT_ACCESS_EXPIRES_MINUTES": 5,
            "JWT_REFRESH_EXPIRES_HOURS": 2,
        }
    )
    assert provider.access_ttl == timedelta(minutes=5)
    assert provider.refresh_ttl == timedelta(hours=2)
