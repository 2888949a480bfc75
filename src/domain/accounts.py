"""
Account domain service - Self-service changes for a signed-in user.

Profile edits touch only the non-secret fields. Password changes need the
current password, refuse the current and recently used passwords, and
clear any login lockout.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .exceptions import (
    IncorrectPassword,
    InvalidRegistration,
    PasswordReused,
    ProtectedFieldChange,
    SamePassword,
)
from .models import Account, Profile
from .passwords import check_password, hash_password
from .ports import UserDirectory
from .registration import MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "country", "contact")
PROTECTED_FIELDS = ("email", "password")
MAX_COUNTRY_LENGTH = 100


@dataclass
class AccountService:
    """Domain service for profile edits and password changes."""

    directory: UserDirectory
    bcrypt_cost: int = 12
    password_history_size: int = 5

    def update_profile(self, account: Account, updates: Mapping[str, Any]) -> Account:
        """
        Apply profile edits.

        Only name, country and contact are taken from ``updates``; other
        keys are ignored. Fields left out or set to None keep their value.

        Raises:
            ProtectedFieldChange: ``updates`` carries an email or password
            InvalidRegistration: An edited field is blank or too long
        """
        if any(updates.get(name) for name in PROTECTED_FIELDS):
            raise ProtectedFieldChange(account.email)

        changes = {
            name: str(updates[name]).strip() for name in EDITABLE_FIELDS if updates.get(name) is not None
        }
        errors = {name: "is required" for name, value in changes.items() if not value}
        if len(changes.get("country", "")) > MAX_COUNTRY_LENGTH:
            errors["country"] = f"must be at most {MAX_COUNTRY_LENGTH} characters"
        if errors:
            raise InvalidRegistration(errors)

        if not changes:
            return account

        profile = Profile(
            name=changes.get("name", account.name),
            country=changes.get("country", account.country),
            contact=changes.get("contact", account.contact),
        )
        return self.directory.update_profile(account, profile)

    def change_password(self, account: Account, current_password: str, new_password: str) -> Account:
        """
        Replace the account's password.

        Raises:
            InvalidRegistration: New password is too short
            IncorrectPassword: ``current_password`` does not match
            SamePassword: New password equals the current one
            PasswordReused: New password matches a recent previous one
        """
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidRegistration({"new_password": f"must be at least {MIN_PASSWORD_LENGTH} characters"})

        if not self.directory.verify_password(account, current_password):
            raise IncorrectPassword(account.email)

        if check_password(new_password, account.password_hash):
            raise SamePassword(account.email)

        if any(check_password(new_password, old_hash) for old_hash in account.password_history):
            raise PasswordReused(account.email)

        updated = self.directory.change_password(
            account, hash_password(new_password, self.bcrypt_cost), self.password_history_size
        )
        logger.info("Password changed for account %s", account.id)
        return updated
