# comments in English; reST docstrings
from __future__ import annotations

import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from authcore.services._shared.errors import TransientError
from authcore.services._shared.ports import (
    ConsumeOutcome,
    ConsumeResult,
    DuplicateTokenError,
    RefreshTokenRecord,
    RefreshTokenStore,
    classify,
)

KEY_PREFIX = "rt:"


def _s(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Surface connection trouble as a retryable service error."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as exc:
        raise TransientError() from exc


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed ledger store with an optimistic-locking consume.

    One hash per token under ``rt:{token}`` with fields ``account_id``,
    ``issued_at``, ``expires_at`` (epoch seconds) and ``revoked`` (``0|1``).
    Keys carry a TTL of the record lifetime plus ``expiry_grace`` seconds,
    counted from ``issued_at``, so Redis drops dead records on its own; the
    sweeper removes revoked ones earlier.

    :param r: A Redis client (already connected).
    :param expiry_grace: Extra key lifetime after ``expires_at``.
    """

    r: redis.Redis
    expiry_grace: int = 60

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"{KEY_PREFIX}{token}"

    @staticmethod
    def _to_ts(dt: datetime) -> float:
        # Naive -> label as UTC (no conversion)
        return (dt if dt.tzinfo else dt.replace(tzinfo=UTC)).timestamp()

    @staticmethod
    def _from_hash(token: str, h: dict) -> RefreshTokenRecord | None:
        if not h:
            return None
        fields = {_s(k): _s(v) for k, v in h.items()}
        return RefreshTokenRecord(
            token=token,
            account_id=fields.get("account_id", ""),
            issued_at=datetime.fromtimestamp(float(fields.get("issued_at", "0")), tz=UTC),
            expires_at=datetime.fromtimestamp(float(fields.get("expires_at", "0")), tz=UTC),
            revoked=fields.get("revoked", "0") == "1",
        )

    # -------------------- API ------------------------

    def insert(self, record: RefreshTokenRecord) -> None:
        """
        Create the hash unless the key already exists.

        :raises DuplicateTokenError: The token string is taken.
        """
        key = self._k(record.token)
        issued = self._to_ts(record.issued_at)
        expires = self._to_ts(record.expires_at)
        ttl = max(1, math.ceil(expires - issued)) + self.expiry_grace

        with _translate_errors():
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        if p.exists(key):
                            p.unwatch()
                            raise DuplicateTokenError("refresh token already exists")
                        p.multi()
                        p.hset(
                            key,
                            mapping={
                                "account_id": record.account_id,
                                "issued_at": repr(issued),
                                "expires_at": repr(expires),
                                "revoked": "1" if record.revoked else "0",
                            },
                        )
                        p.expire(key, ttl)
                        p.execute()
                        return
                except redis.WatchError:
                    # Someone touched the key; the next pass reports the clash
                    continue

    def get(self, token: str) -> RefreshTokenRecord | None:
        with _translate_errors():
            return self._from_hash(token, self.r.hgetall(self._k(token)))

    def consume(self, token: str, now: datetime) -> ConsumeOutcome:
        """
        Atomically flip ``revoked`` when the record is currently valid.

        WATCH/MULTI/EXEC on the single token key: if another client modifies
        the key between our read and ``EXEC`` the transaction aborts and the
        loop re-reads, so at most one caller ever observes ``OK``.
        """
        key = self._k(token)
        with _translate_errors():
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        record = self._from_hash(token, p.hgetall(key))
                        result = classify(record, now)
                        if result is not ConsumeResult.OK:
                            p.unwatch()
                            return ConsumeOutcome(result)
                        p.multi()
                        p.hset(key, "revoked", "1")
                        p.execute()
                        return ConsumeOutcome(ConsumeResult.OK, record)
                except redis.WatchError:
                    # Concurrent modification detected; retry loop
                    continue

    def mark_revoked(self, token: str) -> bool:
        key = self._k(token)
        with _translate_errors():
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        if not p.exists(key):
                            p.unwatch()
                            return False
                        p.multi()
                        p.hset(key, "revoked", "1")
                        p.execute()
                        return True
                except redis.WatchError:
                    continue

    def delete_expired_or_revoked(self, now: datetime) -> int:
        """
        SCAN every ``rt:*`` key and delete the dead ones.

        Both ``revoked`` and expiry are monotonic, so a record read as
        purgeable stays purgeable and no WATCH is needed.
        """
        removed = 0
        with _translate_errors():
            for raw_key in self.r.scan_iter(match=f"{KEY_PREFIX}*", count=500):
                key = _s(raw_key)
                record = self._from_hash(key[len(KEY_PREFIX) :], self.r.hgetall(key))
                if record is not None and record.is_purgeable(now):
                    removed += int(self.r.delete(key))
        return removed
