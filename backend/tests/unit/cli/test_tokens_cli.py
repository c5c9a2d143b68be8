"""Tests for the ``flask tokens`` command group."""

from __future__ import annotations

from authcore.core.container import get_container

from tests.factories.account import AccountFactory


def test_sweep_purges_revoked_tokens(app, session):
    account = AccountFactory()
    session.commit()
    ledger = get_container(app).ledger
    dead = ledger.issue(account.id)
    ledger.revoke(dead.token)
    alive = ledger.issue(account.id)

    result = app.test_cli_runner().invoke(args=["tokens", "sweep"])

    assert result.exit_code == 0, result.output
    assert "Purged 1 refresh token(s)." in result.output
    assert ledger.get(dead.token) is None
    assert ledger.get(alive.token) is not None


def test_sweep_reports_failures(app, monkeypatch):
    sweeper = get_container(app).sweeper

    def boom():
        raise RuntimeError("database is locked")

    monkeypatch.setattr(sweeper, "run_once", boom)

    result = app.test_cli_runner().invoke(args=["tokens", "sweep"])

    assert result.exit_code == 1
    assert "Sweep failed: database is locked" in result.output
