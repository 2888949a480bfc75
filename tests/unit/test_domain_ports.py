"""
Unit tests for domain ports and exceptions.

Tests verify:
- Lifecycle and template enums are properly defined
- Every exception kind carries a stable category
- Fakes and adapters satisfy the ports structurally
- Domain purity (zero framework imports)
"""

import json
import subprocess
from enum import Enum

import pytest

from src.domain.exceptions import (
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
from src.domain.ports import (
    NotificationSender,
    PendingRegistrationStore,
    RegistrationState,
    TemplateKind,
    UserDirectory,
)
from tests.fakes import FakeClock, FakeUserDirectory, RecordingEmailSender


class TestRegistrationStateEnum:
    """Tests for the per-email lifecycle states."""

    def test_is_str_enum(self) -> None:
        assert issubclass(RegistrationState, Enum)
        assert issubclass(RegistrationState, str)

    def test_states(self) -> None:
        assert {state.value for state in RegistrationState} == {"NONE", "PENDING", "VERIFIED"}

    def test_json_serializable(self) -> None:
        assert json.dumps({"state": RegistrationState.PENDING}) == '{"state": "PENDING"}'


class TestTemplateKindEnum:
    def test_kinds(self) -> None:
        assert {kind.name for kind in TemplateKind} == {
            "OTP",
            "WELCOME",
            "SECURITY_ALERT",
            "PASSWORD_RESET",
            "ORDER_CONFIRMATION",
        }


class TestPortsAreStructural:
    """Fakes satisfy the ports without inheriting from them."""

    def test_fake_directory(self) -> None:
        def accepts(directory: UserDirectory) -> None:
            pass

        accepts(FakeUserDirectory(FakeClock()))
        assert FakeUserDirectory.__bases__ == (object,)

    def test_memory_store(self) -> None:
        from src.adapters.repository.memory import InMemoryPendingRegistrationStore

        def accepts(store: PendingRegistrationStore) -> None:
            pass

        accepts(InMemoryPendingRegistrationStore())
        assert InMemoryPendingRegistrationStore.__bases__ == (object,)

    def test_recording_sender(self) -> None:
        def accepts(sender: NotificationSender) -> None:
            pass

        accepts(RecordingEmailSender())


class TestDomainExceptions:
    """Tests for exception hierarchy and categories."""

    @pytest.mark.parametrize(
        ("exc", "category"),
        [
            (InvalidRegistration({"name": "is required"}), "validation"),
            (EmailAlreadyClaimed("a@example.com"), "conflict"),
            (PendingRegistrationNotFound("a@example.com"), "not_found"),
            (AccountNotFound("a@example.com"), "not_found"),
            (InvalidCode("a@example.com"), "invalid_code"),
            (InvalidCredentials("a@example.com"), "invalid_credentials"),
            (ResendTooSoon("a@example.com", retry_after=30), "rate_limited"),
            (AccountLocked("a@example.com"), "locked"),
            (DeliveryFailed("smtp down"), "delivery_failed"),
            (InvalidToken("bad"), "invalid_token"),
            (ProtectedFieldChange("a@example.com"), "protected_field"),
            (IncorrectPassword("a@example.com"), "wrong_password"),
            (SamePassword("a@example.com"), "same_password"),
            (PasswordReused("a@example.com"), "password_reused"),
        ],
    )
    def test_category(self, exc: DomainError, category: str) -> None:
        assert isinstance(exc, DomainError)
        assert exc.category == category

    def test_not_found_kinds_share_base(self) -> None:
        assert issubclass(PendingRegistrationNotFound, NotFound)
        assert issubclass(AccountNotFound, NotFound)

    def test_invalid_registration_keeps_every_field_error(self) -> None:
        exc = InvalidRegistration({"name": "is required", "contact": "is required"})

        assert exc.errors == {"name": "is required", "contact": "is required"}
        assert "name" in str(exc)
        assert "contact" in str(exc)

    def test_resend_too_soon_carries_retry_after(self) -> None:
        with pytest.raises(ResendTooSoon) as exc_info:
            raise ResendTooSoon("a@example.com", retry_after=42)

        assert exc_info.value.retry_after == 42


class TestDomainPurity:
    """Tests for domain purity - zero framework or transport imports."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "from fastapi",
            "import fastapi",
            "from pydantic",
            "import pydantic",
            "from psycopg",
            "import psycopg",
            "from jose",
            "import jose",
            "import smtplib",
        ],
    )
    def test_no_infrastructure_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, "src/domain/"],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"{pattern!r} found in domain: {result.stdout}"
