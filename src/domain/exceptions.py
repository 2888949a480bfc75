"""
Domain exceptions - Semantic error types for signup and login.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Every exception kind carries a stable ``category`` so callers can
render feedback without inspecting message text.
"""


class DomainError(Exception):
    """Base class for signup and login domain errors."""

    category = "error"


class InvalidRegistration(DomainError):
    """Registration payload failed field-presence or shape validation."""

    category = "validation"

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))


class EmailAlreadyClaimed(DomainError):
    """An account already exists for this email."""

    category = "conflict"


class NotFound(DomainError):
    """Requested pending registration or account does not exist."""

    category = "not_found"


class PendingRegistrationNotFound(NotFound):
    """No unexpired pending registration for this email."""

    pass


class AccountNotFound(NotFound):
    """No account for this email."""

    pass


class InvalidCode(DomainError):
    """Submitted OTP does not match the most recently issued code."""

    category = "invalid_code"


class InvalidCredentials(DomainError):
    """Password does not match the stored hash."""

    category = "invalid_credentials"


class ResendTooSoon(DomainError):
    """OTP resend requested before the cooldown elapsed."""

    category = "rate_limited"

    def __init__(self, email: str, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(f"{email}: retry in {retry_after}s")


class AccountLocked(DomainError):
    """Account is temporarily locked after repeated failed logins."""

    category = "locked"


class DeliveryFailed(DomainError):
    """Notification could not be delivered."""

    category = "delivery_failed"


class InvalidToken(DomainError):
    """Session token is malformed, tampered with or expired."""

    category = "invalid_token"


class ProtectedFieldChange(DomainError):
    """Profile update tried to change the email or password."""

    category = "protected_field"


class IncorrectPassword(DomainError):
    """Current password given for a password change does not match."""

    category = "wrong_password"


class PasswordReused(DomainError):
    """New password matches one of the account's previous passwords."""

    category = "password_reused"


class SamePassword(PasswordReused):
    """New password is the account's current password."""

    category = "same_password"
