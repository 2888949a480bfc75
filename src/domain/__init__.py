"""
Domain layer - Pure business logic with zero framework imports.

This package contains the signup and login core: the OTP registration
state machine, the credential session issuer and self-service account
changes. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .accounts import AccountService
from .exceptions import (
    AccountLocked,
    AccountNotFound,
    DeliveryFailed,
    DomainError,
    EmailAlreadyClaimed,
    IncorrectPassword,
    InvalidCode,
    InvalidCredentials,
    InvalidRegistration,
    InvalidToken,
    NotFound,
    PasswordReused,
    PendingRegistrationNotFound,
    ProtectedFieldChange,
    ResendTooSoon,
    SamePassword,
)
from .models import Account, AuthResult, PendingRegistration, Profile, RegistrationPayload, TokenClaims
from .ports import (
    NotificationSender,
    PendingRegistrationStore,
    RegistrationState,
    TemplateKind,
    TokenIssuer,
    UserDirectory,
)
from .registration import RegistrationService
from .sessions import SessionService

__all__ = [
    "Account",
    "AccountLocked",
    "AccountNotFound",
    "AccountService",
    "AuthResult",
    "DeliveryFailed",
    "DomainError",
    "EmailAlreadyClaimed",
    "IncorrectPassword",
    "InvalidCode",
    "InvalidCredentials",
    "InvalidRegistration",
    "InvalidToken",
    "NotFound",
    "NotificationSender",
    "PasswordReused",
    "PendingRegistration",
    "PendingRegistrationNotFound",
    "PendingRegistrationStore",
    "Profile",
    "ProtectedFieldChange",
    "RegistrationPayload",
    "RegistrationService",
    "RegistrationState",
    "ResendTooSoon",
    "SamePassword",
    "SessionService",
    "TemplateKind",
    "TokenClaims",
    "TokenIssuer",
    "UserDirectory",
]
