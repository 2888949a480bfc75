"""
Shared fixtures for adversarial tests.

Adversarial tests drive the domain services from many threads against the
thread-safe in-memory fakes defined in tests/fakes.py.
"""

import pytest

from src.domain.models import RegistrationPayload
from src.domain.registration import RegistrationService
from tests.fakes import ATTACK_EMAIL, RecordingEmailSender


@pytest.fixture
def payload() -> RegistrationPayload:
    return RegistrationPayload(name="Mallory", password="hunter22", country="PK", contact="+92")


@pytest.fixture
def pending_code(
    service: RegistrationService,
    email_sender: RecordingEmailSender,
    payload: RegistrationPayload,
) -> str:
    """Start a signup for ATTACK_EMAIL and return the delivered code."""
    service.request_registration(ATTACK_EMAIL, payload)
    return email_sender.last_code(ATTACK_EMAIL)
