"""
Session domain service - Credential checks and session token minting.

Lockout policy (threshold, lock duration) belongs to the user directory;
this service only asks whether an account is locked and reports failures.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .exceptions import AccountLocked, AccountNotFound, InvalidCredentials
from .models import Account, AuthResult
from .passwords import check_password
from .ports import TokenIssuer, UserDirectory

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionService:
    """
    Domain service for login.

    Validates credentials against the directory and mints bearer tokens.
    """

    directory: UserDirectory
    tokens: TokenIssuer
    clock: Callable[[], datetime] = field(default=utc_now)

    def authenticate(self, email: str, password: str) -> AuthResult:
        """
        Check credentials and open a session.

        Args:
            email: User's email (will be normalized)
            password: User's plaintext password

        Returns:
            AuthResult with the refreshed account and a session token

        Raises:
            AccountNotFound: No account for this email
            AccountLocked: Too many recent failures
            InvalidCredentials: Password mismatch
        """
        normalized_email = email.strip().lower()
        account = self.directory.find_by_address(normalized_email)
        if account is None:
            # Burn a bcrypt comparison so unknown emails take as long as known ones
            check_password(password, None)
            raise AccountNotFound(normalized_email)

        if self.directory.is_locked(account):
            logger.warning("Login refused for locked account %s", account.id)
            raise AccountLocked(normalized_email)

        if not self.directory.verify_password(account, password):
            self.directory.increment_failed_attempts(account)
            raise InvalidCredentials(normalized_email)

        self.directory.reset_failed_attempts(account)
        account = self.directory.record_login(account, self.clock())
        return AuthResult(account=account, token=self.issue(account))

    def issue(self, account: Account) -> str:
        """Mint a session token for an account."""
        return self.tokens.issue(account)
