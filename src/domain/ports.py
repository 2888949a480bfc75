"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from .models import Account, PendingRegistration, Profile, TokenClaims


class RegistrationState(str, Enum):
    """
    Registration lifecycle states for a single email.

    State Transitions:
    - NONE -> PENDING (OTP issued)
    - PENDING -> PENDING (OTP re-issued, code and window refreshed)
    - PENDING -> VERIFIED (correct OTP, account created)
    - PENDING -> NONE (expired; observed lazily on next access)

    VERIFIED is terminal: the pending entry is gone and an account exists.
    """

    NONE = "NONE"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"


class TemplateKind(str, Enum):
    """Message templates understood by notification senders."""

    OTP = "OTP"
    WELCOME = "WELCOME"
    SECURITY_ALERT = "SECURITY_ALERT"
    PASSWORD_RESET = "PASSWORD_RESET"
    ORDER_CONFIRMATION = "ORDER_CONFIRMATION"


class PendingRegistrationStore(Protocol):
    """Port interface for the keyed, TTL-bounded pending registration table."""

    def get(self, email: str) -> PendingRegistration | None:
        """
        Fetch the pending registration for an email.

        Returns None if absent or if the store's TTL already elapsed.
        """
        ...

    def put(self, record: PendingRegistration, ttl_seconds: int) -> None:
        """
        Atomically insert or overwrite the entry keyed by ``record.email``.

        Args:
            record: Pending registration to store
            ttl_seconds: Seconds after which the store may drop the entry
        """
        ...

    def delete(self, email: str) -> bool:
        """
        Remove the entry for an email.

        Returns:
            True if this call removed an entry, False if none was present.
            Concurrent callers see True at most once per stored entry.
        """
        ...


class UserDirectory(Protocol):
    """Port interface for the account system of record."""

    def find_by_address(self, email: str) -> Account | None: ...

    def create(self, email: str, password_hash: str, profile: Profile) -> Account:
        """
        Persist a verified account.

        Raises:
            EmailAlreadyClaimed: If an account already uses this email
        """
        ...

    def verify_password(self, account: Account, password: str) -> bool: ...

    def increment_failed_attempts(self, account: Account) -> None:
        """Count a failed login; locks the account once the threshold is hit."""
        ...

    def reset_failed_attempts(self, account: Account) -> None: ...

    def is_locked(self, account: Account) -> bool: ...

    def record_login(self, account: Account, at: datetime) -> Account:
        """Store the last successful login time and return the updated account."""
        ...

    def update_profile(self, account: Account, profile: Profile) -> Account:
        """
        Overwrite name, country and contact.

        Raises:
            AccountNotFound: If the account no longer exists
        """
        ...

    def change_password(self, account: Account, password_hash: str, keep_history: int) -> Account:
        """
        Replace the password hash and clear any lockout.

        The outgoing hash is appended to the account's history, which is
        trimmed to the newest ``keep_history`` entries.

        Raises:
            AccountNotFound: If the account no longer exists
        """
        ...


class NotificationSender(Protocol):
    """Port interface for message delivery."""

    def send(self, email: str, kind: TemplateKind, data: dict[str, Any]) -> None:
        """
        Deliver a templated message.

        Raises:
            DeliveryFailed: If the message could not be handed off
        """
        ...


class TokenIssuer(Protocol):
    """Port interface for signed session tokens."""

    def issue(self, account: Account) -> str: ...

    def decode(self, token: str) -> TokenClaims:
        """
        Validate signature and expiry.

        Raises:
            InvalidToken: If the token is tampered with, malformed or expired
        """
        ...
