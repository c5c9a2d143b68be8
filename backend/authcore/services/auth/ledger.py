# authcore/services/auth/ledger.py
"""
Refresh-token ledger: the single-use state machine behind token rotation.

A record moves ``valid -> revoked`` exactly once, through either
:meth:`RefreshTokenLedger.validate_and_consume` or
:meth:`RefreshTokenLedger.revoke`, and is deleted only by
:meth:`RefreshTokenLedger.purge_expired_or_revoked`. Atomicity of the
consume step is delegated to the :class:`RefreshTokenStore` adapter.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta

from authcore.services._shared.base import Clock, utc_now
from authcore.services._shared.errors import TransientError
from authcore.services._shared.ports import (
    ConsumeResult,
    DuplicateTokenError,
    RefreshTokenRecord,
    RefreshTokenStore,
)

log = logging.getLogger(__name__)

TOKEN_BYTES = 32


class LedgerError(Exception):
    """Base class for consume failures; ``reason`` is for logs only."""

    reason = "unknown"


class RefreshTokenNotFound(LedgerError):
    reason = "not_found"


class RefreshTokenExpired(LedgerError):
    reason = "expired"


class RefreshTokenRevoked(LedgerError):
    reason = "revoked"


_FAILURES: dict[ConsumeResult, type[LedgerError]] = {
    ConsumeResult.NOT_FOUND: RefreshTokenNotFound,
    ConsumeResult.EXPIRED: RefreshTokenExpired,
    ConsumeResult.REVOKED: RefreshTokenRevoked,
}


class RefreshTokenLedger:
    """
    Issue, consume, revoke and purge refresh tokens.

    :param store: Persistence adapter with an atomic ``consume``.
    :param ttl: Refresh token lifetime (7 days by default).
    :param clock: Callable returning aware UTC datetimes.
    :param max_issue_attempts: Fresh-token retries on a uniqueness clash.
    """

    def __init__(
        self,
        store: RefreshTokenStore,
        *,
        ttl: timedelta = timedelta(days=7),
        clock: Clock | None = None,
        max_issue_attempts: int = 3,
    ) -> None:
        self.store = store
        self.ttl = ttl
        self._clock = clock or utc_now
        self.max_issue_attempts = max(1, max_issue_attempts)

    def issue(self, account_id: str) -> RefreshTokenRecord:
        """
        Create and persist a new valid record for ``account_id``.

        :raises TransientError: Every attempt collided (or storage failed).
        """
        for _ in range(self.max_issue_attempts):
            now = self._clock()
            record = RefreshTokenRecord(
                token=secrets.token_urlsafe(TOKEN_BYTES),
                account_id=account_id,
                issued_at=now,
                expires_at=now + self.ttl,
            )
            try:
                self.store.insert(record)
            except DuplicateTokenError:
                log.warning("refresh token collision, retrying", extra={"account_id": account_id})
                continue
            return record
        raise TransientError("Could not issue refresh token")

    def validate_and_consume(self, token: str) -> RefreshTokenRecord:
        """
        Atomically revoke ``token`` if it is currently valid.

        At most one caller ever succeeds for a given token string.

        :returns: The record as it was before revocation.
        :raises RefreshTokenNotFound: Unknown token.
        :raises RefreshTokenExpired: ``now >= expires_at`` (checked before revocation).
        :raises RefreshTokenRevoked: Already consumed or logged out.
        """
        outcome = self.store.consume(token, self._clock())
        if outcome.result is ConsumeResult.OK and outcome.record is not None:
            return outcome.record
        raise _FAILURES.get(outcome.result, RefreshTokenNotFound)()

    def revoke(self, token: str) -> None:
        """Mark ``token`` revoked; unknown or already revoked tokens are a no-op."""
        self.store.mark_revoked(token)

    def purge_expired_or_revoked(self) -> int:
        """Delete every record that can never be consumed again."""
        return self.store.delete_expired_or_revoked(self._clock())

    def get(self, token: str) -> RefreshTokenRecord | None:
        return self.store.get(token)
