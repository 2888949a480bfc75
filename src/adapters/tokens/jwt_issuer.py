"""
JWT token adapter - Implements TokenIssuer protocol with python-jose.

Tokens are stateless: signature and ``exp`` are all that is checked,
there is no revocation list.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from src.domain.exceptions import InvalidToken
from src.domain.models import Account, TokenClaims
from src.domain.sessions import utc_now


class JwtTokenIssuer:
    """Signs session tokens carrying subject, email, issue and expiry times."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    def issue(self, account: Account) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": account.id,
            "email": account.email,
            "iat": now,
            "exp": now + self._ttl,
            "type": "access",
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidToken("Invalid or expired token") from exc

        if payload.get("type") != "access" or "sub" not in payload:
            raise InvalidToken("Invalid token")

        return TokenClaims(
            subject=str(payload["sub"]),
            email=str(payload.get("email", "")),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
