"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest
from authcore.core.config import TestingConfig
from authcore.core.extensions import db as _db  # Flask-SQLAlchemy instance
from authcore.factory import create_app  # application factory under test
from authcore.infra.crypto.credential_verifier import CredentialVerifier
from authcore.infra.jwt.token_codec import JWTTokenCodec
from authcore.services._shared.ports import (
    InMemoryAccountDirectory,
    InMemoryRefreshTokenStore,
)
from authcore.services.auth import RefreshTokenLedger, TokenIssuer
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from tests.helpers.utils import FrozenClock

TEST_SECRET = "unit-test-secret-key-with-at-least-32-bytes"
FAST_HASH = "pbkdf2:sha256:1000"


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Keeps the ledger in SQL and the background sweeper off.
    - Avoids hitting external services (no Redis URL).
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REFRESH_STORE_BACKEND = "sql"
    REDIS_URL = None
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one. Unit of Work commits release
    their own SAVEPOINT, so everything is rolled back after the test.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- HTTP -----------------------------------------------------------------------
@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


# -- In-memory auth core --------------------------------------------------------
@pytest.fixture()
def clock() -> FrozenClock:
    """Controllable UTC clock starting at 2026-01-01 00:00:00."""
    return FrozenClock(datetime(2026, 1, 1, tzinfo=UTC))


@pytest.fixture()
def codec(clock) -> JWTTokenCodec:
    return JWTTokenCodec(secret=TEST_SECRET, clock=clock)


@pytest.fixture()
def verifier() -> CredentialVerifier:
    return CredentialVerifier(method=FAST_HASH)


@pytest.fixture()
def token_store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def ledger(token_store, clock) -> RefreshTokenLedger:
    return RefreshTokenLedger(token_store, clock=clock)


@pytest.fixture()
def accounts() -> InMemoryAccountDirectory:
    return InMemoryAccountDirectory()


@pytest.fixture()
def issuer(accounts, ledger, codec, verifier) -> TokenIssuer:
    """Build a TokenIssuer wired to in-memory doubles and the frozen clock."""
    return TokenIssuer(accounts=accounts, ledger=ledger, codec=codec, verifier=verifier)
