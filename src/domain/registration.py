"""
Registration domain service - OTP-gated signup state machine.

This module contains the core business logic for user signup: an email
is proven by a one-time password before any account is persisted.

Registration State Machine
==========================

States (per normalized email):
- NONE: No pending registration (never requested, expired, or rolled back)
- PENDING: OTP issued and unexpired, signup fields held in the pending store
- VERIFIED: Terminal; account created and pending entry removed

Transitions:
    NONE    -> PENDING   (request_registration, OTP delivered)
    PENDING -> PENDING   (request_registration again: overwrite, old code dies)
    PENDING -> PENDING   (resend_code: fresh code, fresh 10-minute window)
    PENDING -> VERIFIED  (verify_code with the current code)
    PENDING -> NONE      (expiry, observed lazily on the next access)

Notes:
- Expiry is lazy: stale entries are deleted when an operation reads them.
- Concurrent requests for the same email are last-write-wins; the pending
  store's atomic upsert keeps at most one entry per email.
- The pending entry is deleted before the account is created, and only the
  caller whose delete succeeded may create it, so an OTP is promoted once.
"""

import logging
import math
import re
import secrets
import string
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from random import Random
from typing import Any

from .exceptions import (
    DeliveryFailed,
    EmailAlreadyClaimed,
    InvalidCode,
    InvalidRegistration,
    PendingRegistrationNotFound,
    ResendTooSoon,
)
from .models import Account, AuthResult, PendingRegistration, RegistrationPayload
from .passwords import hash_password
from .ports import (
    NotificationSender,
    PendingRegistrationStore,
    RegistrationState,
    TemplateKind,
    UserDirectory,
)
from .sessions import SessionService, utc_now

logger = logging.getLogger(__name__)

CODE_LENGTH = 6
MIN_PASSWORD_LENGTH = 6
_EMAIL_SHAPE = re.compile(r"^\S+@\S+\.\S+$")


def run_inline(func: Callable[..., Any], *args: Any) -> None:
    """Default scheduler: run the task immediately in the caller's thread."""
    func(*args)


@dataclass
class RegistrationService:
    """
    Domain service for OTP-gated signup.

    Orchestrates code issuance and delivery, resend cooldown, code
    verification and promotion of a pending registration to an account.
    """

    store: PendingRegistrationStore
    directory: UserDirectory
    email_sender: NotificationSender
    sessions: SessionService
    otp_ttl_seconds: int = 600
    resend_cooldown_seconds: int = 60
    bcrypt_cost: int = 12
    clock: Callable[[], datetime] = field(default=utc_now)
    rng: Random = field(default_factory=secrets.SystemRandom)
    schedule: Callable[..., None] = field(default=run_inline)

    def request_registration(self, email: str, payload: RegistrationPayload) -> str:
        """
        Start a signup by issuing and delivering an OTP.

        Args:
            email: User's email address (will be normalized)
            payload: Signup fields (password is hashed before storage)

        Returns:
            Normalized email address

        Raises:
            InvalidRegistration: If any field is missing or malformed
            EmailAlreadyClaimed: If an account already exists
            DeliveryFailed: If the OTP could not be sent (nothing stays pending)
        """
        normalized_email = self._normalize_email(email)
        self._validate(normalized_email, payload)

        if self.directory.find_by_address(normalized_email) is not None:
            raise EmailAlreadyClaimed(normalized_email)

        now = self.clock()
        record = PendingRegistration(
            email=normalized_email,
            code=self._generate_code(),
            profile=payload.profile(),
            password_hash=hash_password(payload.password, self.bcrypt_cost),
            issued_at=now,
            expires_at=now + timedelta(seconds=self.otp_ttl_seconds),
        )
        self.store.put(record, self.otp_ttl_seconds)

        try:
            self._send_code(record)
        except DeliveryFailed:
            self.store.delete(normalized_email)
            logger.warning("OTP delivery to %s failed, pending registration discarded", normalized_email)
            raise

        logger.info("OTP issued for %s", normalized_email)
        return normalized_email

    def resend_code(self, email: str) -> None:
        """
        Re-issue the OTP for a pending registration.

        The previous code stops working; the signup fields are kept.

        Raises:
            PendingRegistrationNotFound: No unexpired pending registration
            ResendTooSoon: Cooldown since the last resend has not elapsed
            DeliveryFailed: The new code could not be sent (previous entry restored)
        """
        normalized_email = self._normalize_email(email)
        now = self.clock()
        record = self._load_pending(normalized_email, now)

        if self.resend_cooldown_seconds > 0 and record.last_resend_at is not None:
            elapsed = (now - record.last_resend_at).total_seconds()
            if elapsed < self.resend_cooldown_seconds:
                raise ResendTooSoon(
                    normalized_email,
                    retry_after=math.ceil(self.resend_cooldown_seconds - elapsed),
                )

        refreshed = record.reissued(
            code=self._generate_code(),
            now=now,
            expires_at=now + timedelta(seconds=self.otp_ttl_seconds),
        )
        self.store.put(refreshed, self.otp_ttl_seconds)

        try:
            self._send_code(refreshed)
        except DeliveryFailed:
            remaining = max(1, math.ceil((record.expires_at - now).total_seconds()))
            self.store.put(record, remaining)
            logger.warning("OTP resend to %s failed, previous code kept", normalized_email)
            raise

        logger.info("OTP re-issued for %s", normalized_email)

    def verify_code(self, email: str, code: str) -> AuthResult:
        """
        Verify the OTP and promote the pending registration to an account.

        Args:
            email: User's email (will be normalized)
            code: Submitted OTP (surrounding whitespace ignored)

        Returns:
            AuthResult with the created account and a session token

        Raises:
            PendingRegistrationNotFound: No pending registration, or it expired
            InvalidCode: Code differs from the most recently issued one
            EmailAlreadyClaimed: Account created concurrently by another path
        """
        normalized_email = self._normalize_email(email)
        record = self._load_pending(normalized_email, self.clock())

        if not secrets.compare_digest(record.code.encode(), code.strip().encode()):
            raise InvalidCode(normalized_email)

        # Whoever removes the entry owns the promotion
        if not self.store.delete(normalized_email):
            raise PendingRegistrationNotFound(normalized_email)

        account = self.directory.create(normalized_email, record.password_hash, record.profile)
        logger.info("Account %s created for %s", account.id, normalized_email)

        token = self.sessions.issue(account)
        self.schedule(self._send_welcome, account)
        return AuthResult(account=account, token=token)

    def state_of(self, email: str) -> RegistrationState:
        """Report where an email sits in the registration lifecycle."""
        normalized_email = self._normalize_email(email)
        if self.directory.find_by_address(normalized_email) is not None:
            return RegistrationState.VERIFIED
        record = self.store.get(normalized_email)
        if record is None or record.is_expired(self.clock()):
            return RegistrationState.NONE
        return RegistrationState.PENDING

    def is_email_available(self, email: str) -> bool:
        """True if no account uses this email yet."""
        return self.directory.find_by_address(self._normalize_email(email)) is None

    def _load_pending(self, email: str, now: datetime) -> PendingRegistration:
        record = self.store.get(email)
        if record is None:
            raise PendingRegistrationNotFound(email)
        if record.is_expired(now):
            self.store.delete(email)
            raise PendingRegistrationNotFound(email)
        return record

    def _send_code(self, record: PendingRegistration) -> None:
        self.email_sender.send(
            record.email,
            TemplateKind.OTP,
            {"code": record.code, "expires_in_minutes": self.otp_ttl_seconds // 60},
        )

    def _send_welcome(self, account: Account) -> None:
        """Best-effort welcome email; the account already exists either way."""
        try:
            self.email_sender.send(account.email, TemplateKind.WELCOME, {"name": account.name})
        except DeliveryFailed as exc:
            logger.warning("Welcome email to %s not delivered: %s", account.email, exc)

    def _validate(self, email: str, payload: RegistrationPayload) -> None:
        errors: dict[str, str] = {}
        if not payload.name or not payload.name.strip():
            errors["name"] = "is required"
        if not _EMAIL_SHAPE.match(email):
            errors["email"] = "is not a valid email address"
        if not payload.password or len(payload.password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"must be at least {MIN_PASSWORD_LENGTH} characters"
        if not payload.country or not payload.country.strip():
            errors["country"] = "is required"
        if not payload.contact or not payload.contact.strip():
            errors["contact"] = "is required"
        if errors:
            raise InvalidRegistration(errors)

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _generate_code(self) -> str:
        """
        Generate a 6-digit OTP from the injected random source.

        Returns string to preserve leading zeros.
        """
        return "".join(self.rng.choice(string.digits) for _ in range(CODE_LENGTH))
