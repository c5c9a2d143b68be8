from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto
from typing import Protocol


class ConsumeResult(Enum):
    """Outcome of an atomic consume (read-and-mark-revoked) attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()


class DuplicateTokenError(Exception):
    """Raised by ``insert`` when the token string already exists (retryable)."""


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    One ledger entry.

    :ivar token: Opaque bearer value handed to the client (unique).
    :ivar account_id: Owning account (back-reference only).
    :ivar issued_at: Issuance time (UTC).
    :ivar expires_at: ``issued_at`` + refresh lifetime (UTC).
    :ivar revoked: Monotonic flag, false -> true only.
    """

    token: str
    account_id: str
    issued_at: datetime
    expires_at: datetime
    revoked: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_valid(self, now: datetime) -> bool:
        return not self.revoked and not self.is_expired(now)

    def is_purgeable(self, now: datetime) -> bool:
        return self.revoked or self.expires_at < now


@dataclass(frozen=True, slots=True)
class ConsumeOutcome:
    """
    Result of :meth:`RefreshTokenStore.consume`.

    ``record`` is the pre-revocation snapshot when ``result`` is ``OK`` and
    ``None`` when nothing was found.
    """

    result: ConsumeResult
    record: RefreshTokenRecord | None = None


def classify(record: RefreshTokenRecord | None, now: datetime) -> ConsumeResult:
    """Return why ``record`` cannot be consumed, or ``OK`` when it can."""
    if record is None:
        return ConsumeResult.NOT_FOUND
    if record.is_expired(now):
        return ConsumeResult.EXPIRED
    if record.revoked:
        return ConsumeResult.REVOKED
    return ConsumeResult.OK


class RefreshTokenStore(Protocol):
    """
    Persistence port for the refresh-token ledger, keyed by ``token``.

    ``consume`` MUST be atomic per token: among concurrent callers presenting
    the same valid token exactly one observes ``OK``. Different tokens must
    never contend with each other.
    """

    def insert(self, record: RefreshTokenRecord) -> None:
        """Persist a new record. :raises DuplicateTokenError: on token clash."""

    def get(self, token: str) -> RefreshTokenRecord | None:
        """Fetch a record snapshot (if present)."""

    def consume(self, token: str, now: datetime) -> ConsumeOutcome:
        """Mark the record revoked only if it is currently valid."""

    def mark_revoked(self, token: str) -> bool:
        """Revoke a record. :returns: True if it existed."""

    def delete_expired_or_revoked(self, now: datetime) -> int:
        """Delete every record with ``revoked or expires_at < now``."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory ledger store.

    .. note::
       A single lock serializes every operation; that is enough for tests
       and single-process use but it is not shared across instances.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: RefreshTokenRecord) -> None:
        with self._lock:
            if record.token in self._by_token:
                raise DuplicateTokenError("refresh token already exists")
            self._by_token[record.token] = record

    def get(self, token: str) -> RefreshTokenRecord | None:
        with self._lock:
            return self._by_token.get(token)

    def consume(self, token: str, now: datetime) -> ConsumeOutcome:
        with self._lock:
            record = self._by_token.get(token)
            result = classify(record, now)
            if result is not ConsumeResult.OK:
                return ConsumeOutcome(result)
            self._by_token[token] = replace(record, revoked=True)
            return ConsumeOutcome(ConsumeResult.OK, record)

    def mark_revoked(self, token: str) -> bool:
        with self._lock:
            record = self._by_token.get(token)
            if record is None:
                return False
            if not record.revoked:
                self._by_token[token] = replace(record, revoked=True)
            return True

    def delete_expired_or_revoked(self, now: datetime) -> int:
        with self._lock:
            doomed = [t for t, r in self._by_token.items() if r.is_purgeable(now)]
            for token in doomed:
                del self._by_token[token]
            return len(doomed)

    def __len__(self) -> int:
        return len(self._by_token)
