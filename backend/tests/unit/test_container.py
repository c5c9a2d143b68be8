"""Tests for the auth composition root and the factory's secret guard."""

from __future__ import annotations

import logging

import fakeredis
import pytest
from authcore.core import extensions
from authcore.core.config import DEFAULT_JWT_SECRET, ProductionConfig
from authcore.core.container import build_container, get_container
from authcore.factory import _check_secrets, create_app
from authcore.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from authcore.infra.sql.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore
from authcore.services._shared.ports import InMemoryRefreshTokenStore
from authcore.services.auth import TokenIssuer
from flask import Flask


@pytest.fixture
def bare_app(app):
    """A throwaway Flask app carrying a copy of the test config."""
    other = Flask("container-test")
    other.config.update(app.config)
    return other


def test_app_container_uses_sql_store(app):
    container = get_container(app)

    assert isinstance(container.store, SQLAlchemyRefreshTokenStore)
    assert isinstance(container.issuer(), TokenIssuer)
    assert container.token_cfg.access_expires == app.config["ACCESS_TOKEN_EXPIRES"]
    assert not container.sweeper.is_running


def test_memory_backend(bare_app):
    bare_app.config["REFRESH_STORE_BACKEND"] = "memory"

    assert isinstance(build_container(bare_app).store, InMemoryRefreshTokenStore)


def test_redis_backend_uses_shared_client(bare_app, monkeypatch):
    fake = fakeredis.FakeRedis()
    monkeypatch.setattr(extensions, "redis_client", fake)
    bare_app.config["REFRESH_STORE_BACKEND"] = "redis"

    store = build_container(bare_app).store

    assert isinstance(store, RedisRefreshTokenStore)
    assert store.r is fake


def test_unknown_backend_is_rejected(bare_app):
    bare_app.config["REFRESH_STORE_BACKEND"] = "cassandra"

    with pytest.raises(RuntimeError, match="REFRESH_STORE_BACKEND"):
        build_container(bare_app)


def test_get_container_requires_init():
    with pytest.raises(RuntimeError):
        get_container(Flask("uninitialized"))


def test_production_refuses_placeholder_secret():
    class PlaceholderSecret(ProductionConfig):
        JWT_SECRET_KEY = DEFAULT_JWT_SECRET

    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        create_app(PlaceholderSecret)


def _flask_with(**config) -> Flask:
    flask_app = Flask("secret-check")
    flask_app.config.update(config)
    return flask_app


def test_debug_with_placeholder_secret_warns(caplog):
    flask_app = _flask_with(DEBUG=True, TESTING=False, JWT_SECRET_KEY=DEFAULT_JWT_SECRET)

    with caplog.at_level(logging.WARNING, logger="authcore.factory"):
        _check_secrets(flask_app)

    assert any("placeholder" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "config",
    [
        {"DEBUG": True, "TESTING": False, "JWT_SECRET_KEY": "a-real-secret-with-enough-bytes"},
        {"DEBUG": False, "TESTING": True, "JWT_SECRET_KEY": DEFAULT_JWT_SECRET},
    ],
)
def test_real_secret_or_testing_is_silent(config, caplog):
    with caplog.at_level(logging.WARNING, logger="authcore.factory"):
        _check_secrets(_flask_with(**config))

    assert not [r for r in caplog.records if r.name == "authcore.factory"]


def test_json_keys_keep_declaration_order(app):
    assert app.json.sort_keys is False
    with app.test_request_context():
        body = app.json.dumps({"status": "ok", "db": "ok", "version": "dev"})

    assert body.index('"status"') < body.index('"db"') < body.index('"version"')
