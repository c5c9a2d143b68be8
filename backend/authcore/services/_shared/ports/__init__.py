"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) for the collaborators the auth
core depends on but does not own.

Modules
-------
- :mod:`account_directory`:
    Defines :class:`~.AccountDirectory` (lookup and creation of platform
    accounts) plus :class:`~.AccountView`, :class:`~.NewAccount` and
    :class:`~.AccountRole`.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenRecord`,
    :class:`~.ConsumeResult` and :class:`~.ConsumeOutcome`: persistence of
    the refresh-token ledger with an atomic consume step.

Design Notes
------------
Concrete adapters (Redis, SQLAlchemy) live under ``authcore.infra``.
In-memory implementations live next to each port for unit tests.
"""

from __future__ import annotations

from .account_directory import (
    AccountDirectory,
    AccountRole,
    AccountView,
    DuplicateAccountError,
    InMemoryAccountDirectory,
    NewAccount,
    normalize_email,
)
from .refresh_token_store import (
    ConsumeOutcome,
    ConsumeResult,
    DuplicateTokenError,
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
    classify,
)

__all__ = [
    "AccountDirectory",
    "AccountRole",
    "AccountView",
    "DuplicateAccountError",
    "InMemoryAccountDirectory",
    "NewAccount",
    "normalize_email",
    "ConsumeOutcome",
    "ConsumeResult",
    "DuplicateTokenError",
    "InMemoryRefreshTokenStore",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "classify",
]
