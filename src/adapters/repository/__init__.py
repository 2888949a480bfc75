"""Repository adapters - Database and in-process implementations."""

from .memory import InMemoryPendingRegistrationStore
from .postgres import PostgresPendingRegistrationStore, PostgresUserDirectory, run_migrations

__all__ = [
    "InMemoryPendingRegistrationStore",
    "PostgresPendingRegistrationStore",
    "PostgresUserDirectory",
    "run_migrations",
]
