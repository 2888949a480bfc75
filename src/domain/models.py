"""
Domain records - Value objects passed between services and ports.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RegistrationPayload:
    """Signup fields as submitted, before verification."""

    name: str
    password: str
    country: str
    contact: str

    def profile(self) -> "Profile":
        return Profile(name=self.name.strip(), country=self.country.strip(), contact=self.contact.strip())


@dataclass(frozen=True)
class Profile:
    """Non-secret account fields."""

    name: str
    country: str
    contact: str


@dataclass(frozen=True)
class PendingRegistration:
    """
    An unverified signup waiting for its OTP.

    Holds the bcrypt hash of the submitted password, never the raw value.
    """

    email: str
    code: str
    profile: Profile
    password_hash: str
    issued_at: datetime
    expires_at: datetime
    last_resend_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def reissued(self, code: str, now: datetime, expires_at: datetime) -> "PendingRegistration":
        """Copy with a fresh code and window; profile and password are kept."""
        return replace(self, code=code, issued_at=now, expires_at=expires_at, last_resend_at=now)


@dataclass
class Account:
    """A persisted user account as returned by the user directory."""

    id: str
    email: str
    name: str
    country: str
    contact: str
    password_hash: str = field(repr=False)
    email_verified: bool = False
    login_attempts: int = 0
    lock_until: datetime | None = None
    last_login: datetime | None = None
    created_at: datetime | None = None
    # Previous password hashes, oldest first
    password_history: list[str] = field(default_factory=list, repr=False)
    password_changed_at: datetime | None = None

    def public_profile(self) -> dict[str, Any]:
        """Account fields safe to hand to clients (no hashes, no lockout state)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "country": self.country,
            "contact": self.contact,
            "email_verified": self.email_verified,
            "last_login": self.last_login,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful verification or login."""

    account: Account
    token: str


@dataclass(frozen=True)
class TokenClaims:
    """Decoded session token claims."""

    subject: str
    email: str
    issued_at: datetime
    expires_at: datetime
