"""Unit tests for :class:`ExpirySweeper`."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import UTC, datetime

import pytest
from authcore.services._shared.errors import TransientError
from authcore.services.auth import ExpirySweeper


def test_run_once_purges_and_returns_count(ledger, clock):
    dead = ledger.issue("acc-1")
    ledger.revoke(dead.token)
    alive = ledger.issue("acc-1")

    purged = ExpirySweeper(ledger, clock=clock).run_once()

    assert purged == 1
    assert ledger.get(dead.token) is None
    assert ledger.get(alive.token) is not None


def test_run_once_propagates_storage_errors(ledger, monkeypatch):
    def boom():
        raise TransientError()

    monkeypatch.setattr(ledger, "purge_expired_or_revoked", boom)

    with pytest.raises(TransientError):
        ExpirySweeper(ledger).run_once()


def test_tick_logs_and_swallows_failures(ledger, monkeypatch, caplog):
    def boom():
        raise RuntimeError("storage unavailable")

    monkeypatch.setattr(ledger, "purge_expired_or_revoked", boom)

    with caplog.at_level(logging.ERROR, logger="authcore.services.auth.sweeper"):
        assert ExpirySweeper(ledger).tick() is None

    assert "purge failed" in caplog.text
    assert caplog.records[-1].exc_info is not None


def test_run_once_enters_context_factory(ledger):
    entered = []

    @contextmanager
    def ctx():
        entered.append(True)
        yield

    ExpirySweeper(ledger, context_factory=ctx).run_once()

    assert entered == [True]


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2026, 1, 1, 1, 0, tzinfo=UTC), 3600.0),
        (datetime(2026, 1, 1, 2, 0, tzinfo=UTC), 86400.0),
        (datetime(2026, 1, 1, 2, 0, 30, tzinfo=UTC), 86370.0),
        (datetime(2026, 1, 1, 23, 0, tzinfo=UTC), 3 * 3600.0),
    ],
)
def test_seconds_until_next_run(ledger, now, expected):
    assert ExpirySweeper(ledger, hour=2, minute=0).seconds_until_next_run(now) == expected


def test_invalid_schedule_is_rejected(ledger):
    with pytest.raises(ValueError):
        ExpirySweeper(ledger, hour=24)


def test_background_thread_ticks_and_stops(ledger, monkeypatch):
    ticked = threading.Event()
    sweeper = ExpirySweeper(ledger)
    monkeypatch.setattr(sweeper, "seconds_until_next_run", lambda now: 0.01)
    monkeypatch.setattr(sweeper, "tick", lambda: ticked.set())

    sweeper.start()
    try:
        assert sweeper.is_running
        assert ticked.wait(2.0)
    finally:
        sweeper.stop()

    assert not sweeper.is_running
