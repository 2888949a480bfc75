"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta

from fastapi import BackgroundTasks, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryPendingRegistrationStore
from src.adapters.repository.postgres import (
    PostgresPendingRegistrationStore,
    PostgresUserDirectory,
)
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.sender import SmtpEmailSender
from src.adapters.tokens.jwt_issuer import JwtTokenIssuer
from src.config.settings import get_settings
from src.domain.accounts import AccountService
from src.domain.exceptions import InvalidToken
from src.domain.models import Account
from src.domain.ports import NotificationSender, PendingRegistrationStore
from src.domain.registration import RegistrationService
from src.domain.sessions import SessionService

# Module-level singletons - the console sender is stateless and the
# in-memory store must outlive individual requests
_console_sender = ConsoleEmailSender()
_memory_store = InMemoryPendingRegistrationStore()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_user_directory(request: Request) -> PostgresUserDirectory:
    """Create user directory with connection pool and lockout policy."""
    settings = get_settings()
    return PostgresUserDirectory(
        get_pool(request),
        max_attempts=settings.max_login_attempts,
        lockout_seconds=settings.lockout_seconds,
    )


def get_pending_store(request: Request) -> PendingRegistrationStore:
    """Select the pending registration store configured in settings."""
    if get_settings().pending_store == "memory":
        return _memory_store
    return PostgresPendingRegistrationStore(get_pool(request))


def get_email_sender() -> NotificationSender:
    """Get the configured email sender (console singleton or SMTP)."""
    settings = get_settings()
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            use_ssl=settings.smtp_use_ssl,
            user=settings.smtp_user,
            password=settings.smtp_password,
            from_address=settings.email_from_address,
            from_name=settings.email_from_name,
            frontend_url=settings.frontend_url,
        )
    return _console_sender


def get_token_issuer() -> JwtTokenIssuer:
    settings = get_settings()
    return JwtTokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(days=settings.token_ttl_days),
    )


def get_session_service(request: Request) -> SessionService:
    """Create session service with directory and token issuer."""
    return SessionService(directory=get_user_directory(request), tokens=get_token_issuer())


def get_account_service(request: Request) -> AccountService:
    """Create account service for profile edits and password changes."""
    settings = get_settings()
    return AccountService(
        directory=get_user_directory(request),
        bcrypt_cost=settings.bcrypt_cost,
        password_history_size=settings.password_history_size,
    )


def get_registration_service(request: Request, background_tasks: BackgroundTasks) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the pending store, directory, email sender and session
    service. Post-verification emails run as background tasks after the
    response is sent.
    """
    settings = get_settings()
    return RegistrationService(
        store=get_pending_store(request),
        directory=get_user_directory(request),
        email_sender=get_email_sender(),
        sessions=get_session_service(request),
        otp_ttl_seconds=settings.otp_ttl_seconds,
        resend_cooldown_seconds=settings.resend_cooldown_seconds,
        bcrypt_cost=settings.bcrypt_cost,
        schedule=background_tasks.add_task,
    )


# Bearer token security scheme for OpenAPI documentation
http_bearer = HTTPBearer()


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer),
    tokens: JwtTokenIssuer = Depends(get_token_issuer),
    directory: PostgresUserDirectory = Depends(get_user_directory),
) -> Account:
    """
    Resolve the account behind a bearer token.

    Returns 401 for tampered or expired tokens and for tokens whose
    account no longer exists.
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"category": InvalidToken.category, "message": "Invalid or expired token"},
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        claims = tokens.decode(credentials.credentials)
    except InvalidToken:
        raise unauthorized from None

    account = directory.find_by_address(claims.email)
    if account is None or account.id != claims.subject:
        raise unauthorized
    return account
