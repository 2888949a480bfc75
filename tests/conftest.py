"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock
- In-memory fakes for the user directory and email sender
- Domain services wired against the fakes
"""

import pytest

from src.adapters.repository.memory import InMemoryPendingRegistrationStore
from src.adapters.tokens.jwt_issuer import JwtTokenIssuer
from src.domain.accounts import AccountService
from src.domain.registration import RegistrationService
from src.domain.sessions import SessionService
from tests.fakes import TEST_BCRYPT_COST, FakeClock, FakeUserDirectory, RecordingEmailSender


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def directory(clock: FakeClock) -> FakeUserDirectory:
    return FakeUserDirectory(clock)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryPendingRegistrationStore:
    return InMemoryPendingRegistrationStore(clock=clock)


@pytest.fixture
def tokens(clock: FakeClock) -> JwtTokenIssuer:
    return JwtTokenIssuer(secret="test-secret", clock=clock)


@pytest.fixture
def sessions(directory: FakeUserDirectory, tokens: JwtTokenIssuer, clock: FakeClock) -> SessionService:
    return SessionService(directory=directory, tokens=tokens, clock=clock)


@pytest.fixture
def service(
    store: InMemoryPendingRegistrationStore,
    directory: FakeUserDirectory,
    email_sender: RecordingEmailSender,
    sessions: SessionService,
    clock: FakeClock,
) -> RegistrationService:
    return RegistrationService(
        store=store,
        directory=directory,
        email_sender=email_sender,
        sessions=sessions,
        bcrypt_cost=TEST_BCRYPT_COST,
        clock=clock,
    )


@pytest.fixture
def accounts(directory: FakeUserDirectory) -> AccountService:
    return AccountService(directory=directory, bcrypt_cost=TEST_BCRYPT_COST)
