"""Composition root for the auth core.

Builds the codec, verifier, ledger store, ledger, issuer and sweeper from the
Flask config once per application and parks them in
``app.extensions["authcore"]``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import Flask

from authcore.infra.crypto.credential_verifier import CredentialVerifier
from authcore.infra.jwt.token_codec import JWTTokenCodec
from authcore.services._shared.base import ServiceContext
from authcore.services._shared.ports import AccountDirectory, RefreshTokenStore
from authcore.services.auth import (
    AuthTokenConfig,
    ExpirySweeper,
    RefreshTokenLedger,
    TokenIssuer,
)

log = logging.getLogger(__name__)

EXTENSION_KEY = "authcore"
STORE_BACKENDS = ("sql", "redis", "memory")


@dataclass(slots=True)
class AuthContainer:
    """Long-lived collaborators shared by every request."""

    codec: JWTTokenCodec
    verifier: CredentialVerifier
    accounts: AccountDirectory
    store: RefreshTokenStore
    ledger: RefreshTokenLedger
    token_cfg: AuthTokenConfig
    sweeper: ExpirySweeper

    def issuer(self, ctx: ServiceContext | None = None) -> TokenIssuer:
        """Build a request-scoped :class:`TokenIssuer` over the shared parts."""
        return TokenIssuer(
            accounts=self.accounts,
            ledger=self.ledger,
            codec=self.codec,
            verifier=self.verifier,
            token_cfg=self.token_cfg,
            ctx=ctx,
        )


def _build_store(app: Flask) -> RefreshTokenStore:
    backend = str(app.config.get("REFRESH_STORE_BACKEND", "sql")).lower()
    if backend not in STORE_BACKENDS:
        raise RuntimeError(
            f"Unknown REFRESH_STORE_BACKEND {backend!r}; expected one of {STORE_BACKENDS}"
        )
    if backend == "redis":
        from authcore.core.extensions import get_redis
        from authcore.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(get_redis())
    if backend == "memory":
        from authcore.services._shared.ports import InMemoryRefreshTokenStore

        log.warning("refresh tokens are kept in process memory; not for multi-worker use")
        return InMemoryRefreshTokenStore()

    from authcore.infra.sql.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore

    return SQLAlchemyRefreshTokenStore()


def build_container(app: Flask) -> AuthContainer:
    """Create the container from ``app.config``."""
    from authcore.infra.sql.sqlalchemy_account_directory import SQLAlchemyAccountDirectory

    cfg = app.config
    token_cfg = AuthTokenConfig(
        access_expires=cfg["ACCESS_TOKEN_EXPIRES"],
        refresh_expires=cfg["REFRESH_TOKEN_EXPIRES"],
    )
    store = _build_store(app)
    ledger = RefreshTokenLedger(store, ttl=token_cfg.refresh_expires)
    return AuthContainer(
        codec=JWTTokenCodec(secret=cfg["JWT_SECRET_KEY"], algorithm=cfg["JWT_ALGORITHM"]),
        verifier=CredentialVerifier(method=cfg["PASSWORD_HASH_METHOD"]),
        accounts=SQLAlchemyAccountDirectory(),
        store=store,
        ledger=ledger,
        token_cfg=token_cfg,
        sweeper=ExpirySweeper(
            ledger,
            hour=int(cfg["TOKEN_SWEEP_HOUR"]),
            minute=int(cfg["TOKEN_SWEEP_MINUTE"]),
            context_factory=app.app_context,
        ),
    )


def init_app(app: Flask) -> AuthContainer:
    container = build_container(app)
    app.extensions[EXTENSION_KEY] = container
    if app.config.get("TOKEN_SWEEP_ENABLED"):
        container.sweeper.start()
    return container


def get_container(app: Flask) -> AuthContainer:
    try:
        return app.extensions[EXTENSION_KEY]
    except KeyError as exc:
        raise RuntimeError("Auth container is not initialized. Call init_app() first.") from exc
