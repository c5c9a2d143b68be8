# authcore/services/auth/sweeper.py
"""
Daily purge of refresh-token records that can never be consumed again.

:meth:`ExpirySweeper.run_once` is the synchronous administrative entry point
and propagates errors. :meth:`ExpirySweeper.tick` is what the background
thread calls: failures are logged and the next scheduled run retries.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from datetime import datetime, timedelta

from authcore.services._shared.base import Clock, utc_now
from authcore.services.auth.ledger import RefreshTokenLedger

log = logging.getLogger(__name__)

THREAD_NAME = "refresh-token-sweeper"


class ExpirySweeper:
    """
    Run :meth:`RefreshTokenLedger.purge_expired_or_revoked` once a day.

    :param ledger: Ledger to purge.
    :param hour: UTC hour of the daily run.
    :param minute: UTC minute of the daily run.
    :param clock: Callable returning aware UTC datetimes.
    :param context_factory: Returns a context manager entered around each run
        (the Flask app context when the store needs one).
    """

    def __init__(
        self,
        ledger: RefreshTokenLedger,
        *,
        hour: int = 2,
        minute: int = 0,
        clock: Clock | None = None,
        context_factory: Callable[[], AbstractContextManager[object]] = nullcontext,
    ) -> None:
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"invalid sweep time {hour:02d}:{minute:02d}")
        self.ledger = ledger
        self.hour = hour
        self.minute = minute
        self._clock = clock or utc_now
        self._context_factory = context_factory
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------ #
    # Runs
    # ------------------------------------------------------------------ #

    def run_once(self) -> int:
        with self._context_factory():
            purged = self.ledger.purge_expired_or_revoked()
        log.info("refresh tokens purged", extra={"purged": purged})
        return purged

    def tick(self) -> int | None:
        """Scheduled variant of :meth:`run_once` that never raises."""
        try:
            return self.run_once()
        except Exception:
            log.exception("refresh token purge failed; retrying at next scheduled run")
            return None

    # ------------------------------------------------------------------ #
    # Scheduling
    # ------------------------------------------------------------------ #

    def seconds_until_next_run(self, now: datetime) -> float:
        """Seconds from ``now`` to the next ``hour:minute`` (strictly in the future)."""
        target = now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if target <= now:
            target += timedelta(days=1)
        return (target - now).total_seconds()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=THREAD_NAME, daemon=True)
        self._thread.start()
        log.info("sweeper started at %02d:%02d UTC", self.hour, self.minute)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self.seconds_until_next_run(self._clock())):
            self.tick()
        log.info("sweeper stopped")
