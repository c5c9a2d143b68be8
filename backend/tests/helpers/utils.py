"""Tiny helpers shared across test modules."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta


class FrozenClock:
    """Injectable clock that only moves when told to.

    Parameters
    ----------
    start: datetime
        Timezone-aware starting instant.
    """

    def __init__(self, start: datetime) -> None:
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, **delta: float) -> datetime:
        """Move forward by ``timedelta(**delta)`` and return the new instant."""
        with self._lock:
            self._now += timedelta(**delta)
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            self._now = value
