from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from userhub.domain.users.entities import User
from userhub.domain.users.exceptions import TokenVerificationError
from userhub.infrastructure.auth.jwt_tokens import JwtTokenIssuer
from userhub.shared.config import TokenConfig
from userhub.shared.errors.base import SigningError

from conftest import ACCESS_SECRET, REFRESH_SECRET


def _user(user_id: int = 7) -> User:
    now = datetime.now(UTC)
    return User(
        id=user_id,
        username="alice",
        email="a@x.com",
        full_name="Alice Liddell",
        avatar="https://media.example.test/a.png",
        cover_image="",
        password_hash="hashed:p1",
        refresh_token=None,
        created_at=now,
        updated_at=now,
    )


def test_issue_then_verify_recovers_identity(issuer: JwtTokenIssuer) -> None:
    pair = issuer.issue(_user())

    access = issuer.verify_access(pair.access_token)
    refresh = issuer.verify_refresh(pair.refresh_token)

    assert access.user_id == 7
    assert access.token_type == "access"
    assert refresh.user_id == 7
    assert refresh.token_type == "refresh"
    assert refresh.expires_at - refresh.issued_at == timedelta(days=10)
    assert access.expires_at - access.issued_at == timedelta(minutes=15)


def test_access_token_carries_profile_claims(issuer: JwtTokenIssuer) -> None:
    pair = issuer.issue(_user())

    claims = jwt.decode(pair.access_token, ACCESS_SECRET, algorithms=["HS256"])
    refresh_claims = jwt.decode(pair.refresh_token, REFRESH_SECRET, algorithms=["HS256"])

    assert claims["username"] == "alice"
    assert claims["email"] == "a@x.com"
    assert claims["full_name"] == "Alice Liddell"
    assert "username" not in refresh_claims


def test_pairs_issued_back_to_back_differ(issuer: JwtTokenIssuer) -> None:
    first = issuer.issue(_user())
    second = issuer.issue(_user())

    assert first.refresh_token != second.refresh_token
    assert first.access_token != second.access_token


def test_token_types_are_not_interchangeable(issuer: JwtTokenIssuer) -> None:
    pair = issuer.issue(_user())

    with pytest.raises(TokenVerificationError):
        issuer.verify_access(pair.refresh_token)
    with pytest.raises(TokenVerificationError):
        issuer.verify_refresh(pair.access_token)


def test_type_claim_is_checked_even_with_shared_secret() -> None:
    config = TokenConfig(
        access_token_secret=ACCESS_SECRET,
        refresh_token_secret=ACCESS_SECRET,
    )
    issuer = JwtTokenIssuer(config)
    pair = issuer.issue(_user())

    with pytest.raises(TokenVerificationError):
        issuer.verify_access(pair.refresh_token)


def test_expired_token_is_rejected(token_config: TokenConfig) -> None:
    past = datetime.now(UTC) - timedelta(days=30)
    issuer = JwtTokenIssuer(token_config, clock=lambda: past)
    pair = issuer.issue(_user())

    with pytest.raises(TokenVerificationError):
        issuer.verify_refresh(pair.refresh_token)
    with pytest.raises(TokenVerificationError):
        issuer.verify_access(pair.access_token)


def test_tampered_token_is_rejected(issuer: JwtTokenIssuer) -> None:
    pair = issuer.issue(_user())
    forged = jwt.encode(
        {"sub": "1", "type": "refresh", "jti": "x", "iat": 0, "exp": 4102444800},
        "not-the-refresh-secret-0123456789abcdef",
        algorithm="HS256",
    )

    with pytest.raises(TokenVerificationError):
        issuer.verify_refresh(forged)
    with pytest.raises(TokenVerificationError):
        issuer.verify_refresh(pair.refresh_token[:-4] + "AAAA")


def test_missing_secret_raises_signing_error() -> None:
    issuer = JwtTokenIssuer(TokenConfig(access_token_secret="", refresh_token_secret=REFRESH_SECRET))

    with pytest.raises(SigningError) as exc_info:
        issuer.issue(_user())
    assert exc_info.value.status == 500
