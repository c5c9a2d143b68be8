# authcore/infra/sql/sqlalchemy_refresh_token_store.py
from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from sqlalchemy.exc import IntegrityError, OperationalError

from authcore.models.refresh_token import RefreshToken
from authcore.services._shared.errors import TransientError
from authcore.services._shared.ports import (
    ConsumeOutcome,
    ConsumeResult,
    DuplicateTokenError,
    RefreshTokenRecord,
    RefreshTokenStore,
    classify,
)
from authcore.uow import SQLAlchemyUnitOfWork

from ._time import as_utc


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        token=row.token,
        account_id=row.account_id,
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        revoked=bool(row.revoked),
    )


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational ledger store.

    ``consume`` is a conditional ``UPDATE ... WHERE revoked = false AND
    expires_at > now`` whose rowcount decides the winner, so the database row
    lock is the only synchronization primitive. Each call runs in its own
    unit of work.

    .. note::
       Requires an active Flask app context (the UoW uses ``db.session``).
    """

    def insert(self, record: RefreshTokenRecord) -> None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                uow.refresh_tokens.add(
                    RefreshToken(
                        token=record.token,
                        account_id=record.account_id,
                        issued_at=record.issued_at,
                        expires_at=record.expires_at,
                        revoked=record.revoked,
                    )
                )
        except IntegrityError as exc:
            if self.get(record.token) is not None:
                raise DuplicateTokenError("refresh token already exists") from exc
            raise
        except OperationalError as exc:
            raise TransientError() from exc

    def get(self, token: str) -> RefreshTokenRecord | None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                row = uow.refresh_tokens.get_by_token(token)
                return _to_record(row) if row is not None else None
        except OperationalError as exc:
            raise TransientError() from exc

    def consume(self, token: str, now: datetime) -> ConsumeOutcome:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                won = uow.refresh_tokens.revoke_if_valid(token, now)
                row = uow.refresh_tokens.get_by_token(token)
                record = _to_record(row) if row is not None else None
        except OperationalError as exc:
            raise TransientError() from exc

        if won and record is not None:
            # Snapshot as it was before this call flipped the flag
            return ConsumeOutcome(ConsumeResult.OK, replace(record, revoked=False))
        result = classify(record, now)
        if result is ConsumeResult.OK:
            # Row is valid but the UPDATE matched nothing: another writer won
            result = ConsumeResult.REVOKED
        return ConsumeOutcome(result)

    def mark_revoked(self, token: str) -> bool:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                return uow.refresh_tokens.revoke(token)
        except OperationalError as exc:
            raise TransientError() from exc

    def delete_expired_or_revoked(self, now: datetime) -> int:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                return uow.refresh_tokens.delete_expired_or_revoked(now)
        except OperationalError as exc:
            raise TransientError() from exc
