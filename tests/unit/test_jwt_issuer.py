"""
Unit tests for JwtTokenIssuer.

Tests signed session tokens: claims, tamper detection and expiry.
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from src.adapters.tokens.jwt_issuer import JwtTokenIssuer
from src.domain.exceptions import InvalidToken
from src.domain.models import Account


@pytest.fixture
def account() -> Account:
    return Account(
        id="0b7c2d1e-0000-4000-8000-000000000001",
        email="user@example.com",
        name="Ann",
        country="PK",
        contact="+92",
        password_hash="$2b$04$hash",
        email_verified=True,
    )


class TestJwtTokenIssuer:
    def test_round_trip_claims(self, account: Account) -> None:
        issuer = JwtTokenIssuer(secret="s3cret")
        claims = issuer.decode(issuer.issue(account))

        assert claims.subject == account.id
        assert claims.email == account.email
        assert claims.expires_at - claims.issued_at == timedelta(days=7)

    def test_token_is_not_plain_text(self, account: Account) -> None:
        token = JwtTokenIssuer(secret="s3cret").issue(account)
        assert token.count(".") == 2
        assert "$2b$" not in token

    def test_wrong_secret_rejected(self, account: Account) -> None:
        token = JwtTokenIssuer(secret="s3cret").issue(account)

        with pytest.raises(InvalidToken):
            JwtTokenIssuer(secret="other").decode(token)

    def test_tampered_payload_rejected(self, account: Account) -> None:
        token = JwtTokenIssuer(secret="s3cret").issue(account)
        forged = jwt.encode(
            {**jwt.get_unverified_claims(token), "sub": "someone-else"}, "guess", algorithm="HS256"
        )

        with pytest.raises(InvalidToken):
            JwtTokenIssuer(secret="s3cret").decode(forged)

    def test_expired_token_rejected(self, account: Account) -> None:
        long_ago = datetime.now(timezone.utc) - timedelta(days=8)
        issuer = JwtTokenIssuer(secret="s3cret", clock=lambda: long_ago)
        token = issuer.issue(account)

        with pytest.raises(InvalidToken):
            JwtTokenIssuer(secret="s3cret").decode(token)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidToken):
            JwtTokenIssuer(secret="s3cret").decode("not-a-token")

    def test_non_access_token_rejected(self) -> None:
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "x", "iat": now, "exp": now + timedelta(hours=1), "type": "refresh"},
            "s3cret",
            algorithm="HS256",
        )

        with pytest.raises(InvalidToken):
            JwtTokenIssuer(secret="s3cret").decode(token)
