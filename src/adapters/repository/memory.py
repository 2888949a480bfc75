"""
In-process pending registration store - Implements PendingRegistrationStore.

Entries live in a dict guarded by a lock, each with its own TTL deadline.
Suitable for a single worker process; state is lost on restart.
"""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from src.domain.models import PendingRegistration
from src.domain.sessions import utc_now


class InMemoryPendingRegistrationStore:
    """
    Implements PendingRegistrationStore protocol with a locked dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Expired entries are dropped when read, never by a background sweep.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[PendingRegistration, datetime]] = {}
        self._lock = threading.Lock()

    def get(self, email: str) -> PendingRegistration | None:
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                return None
            record, deadline = entry
            if self._clock() > deadline:
                del self._entries[email]
                return None
            return record

    def put(self, record: PendingRegistration, ttl_seconds: int) -> None:
        deadline = self._clock() + timedelta(seconds=ttl_seconds)
        with self._lock:
            self._entries[record.email] = (record, deadline)

    def delete(self, email: str) -> bool:
        with self._lock:
            return self._entries.pop(email, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
