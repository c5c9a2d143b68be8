"""
authcore.services.auth
======================

Credential issuance and refresh-token rotation.

- :class:`~.TokenIssuer`: register / login / refresh / logout.
- :class:`~.RefreshTokenLedger`: single-use refresh-token state machine.
- :class:`~.ExpirySweeper`: daily purge of dead ledger records.
"""

from __future__ import annotations

from .dto import (
    AccountPublicOut,
    AuthResultOut,
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from .ledger import (
    LedgerError,
    RefreshTokenExpired,
    RefreshTokenLedger,
    RefreshTokenNotFound,
    RefreshTokenRevoked,
)
from .service import TokenIssuer
from .sweeper import ExpirySweeper

__all__ = [
    "AccountPublicOut",
    "AuthResultOut",
    "AuthTokenConfig",
    "LoginIn",
    "LogoutIn",
    "RefreshIn",
    "RegisterIn",
    "TokenPairOut",
    "LedgerError",
    "RefreshTokenExpired",
    "RefreshTokenLedger",
    "RefreshTokenNotFound",
    "RefreshTokenRevoked",
    "TokenIssuer",
    "ExpirySweeper",
]
