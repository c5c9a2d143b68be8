from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol
from uuid import uuid4


class AccountRole(str, Enum):
    """Platform roles carried in access-token claims."""

    GUEST = "guest"
    HOST = "host"
    ADMIN = "admin"


class DuplicateAccountError(Exception):
    """Raised by a directory when the email is already taken (unique race)."""


def normalize_email(email: str) -> str:
    """Lowercase and trim an email so lookups are case-insensitive."""
    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class AccountView:
    """
    Read-model of an account as seen by the auth core.

    The core reads ``id``, ``role``, ``password_hash`` and ``is_active``; it
    never mutates an account.
    """

    id: str
    email: str
    password_hash: str
    role: AccountRole
    is_active: bool
    first_name: str = ""
    last_name: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class NewAccount:
    """Fields required to create an account (secret already hashed)."""

    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: AccountRole = AccountRole.GUEST


class AccountDirectory(Protocol):
    """
    Port for the account store owned by the wider platform.

    ``find_by_email`` must compare case-insensitively; ``create`` must raise
    :class:`DuplicateAccountError` when another writer took the email first.
    """

    def find_by_email(self, email: str) -> AccountView | None: ...
    def get(self, account_id: str) -> AccountView | None: ...
    def create(self, fields: NewAccount) -> AccountView: ...


class InMemoryAccountDirectory(AccountDirectory):
    """Dict-backed directory used by unit tests."""

    def __init__(self) -> None:
        self._by_id: dict[str, AccountView] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> AccountView | None:
        key = normalize_email(email)
        with self._lock:
            return next((a for a in self._by_id.values() if a.email == key), None)

    def get(self, account_id: str) -> AccountView | None:
        with self._lock:
            return self._by_id.get(account_id)

    def create(self, fields: NewAccount) -> AccountView:
        email = normalize_email(fields.email)
        with self._lock:
            if any(a.email == email for a in self._by_id.values()):
                raise DuplicateAccountError(email)
            account = AccountView(
                id=str(uuid4()),
                email=email,
                password_hash=fields.password_hash,
                role=fields.role,
                is_active=True,
                first_name=fields.first_name,
                last_name=fields.last_name,
                created_at=datetime.now(UTC),
            )
            self._by_id[account.id] = account
            return account

    def set_active(self, account_id: str, active: bool) -> None:
        """Toggle the active flag (administrative helper for tests)."""
        with self._lock:
            self._by_id[account_id] = replace(self._by_id[account_id], is_active=active)
