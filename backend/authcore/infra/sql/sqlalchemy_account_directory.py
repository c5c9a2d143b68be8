# authcore/infra/sql/sqlalchemy_account_directory.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError, OperationalError

from authcore.models.account import Account
from authcore.services._shared.errors import TransientError
from authcore.services._shared.ports import (
    AccountDirectory,
    AccountRole,
    AccountView,
    DuplicateAccountError,
    NewAccount,
)
from authcore.uow import SQLAlchemyUnitOfWork

from ._time import as_utc


def _to_view(account: Account) -> AccountView:
    return AccountView(
        id=account.id,
        email=account.email,
        password_hash=account.password_hash,
        role=AccountRole(account.role),
        is_active=bool(account.is_active),
        first_name=account.first_name,
        last_name=account.last_name,
        created_at=as_utc(account.created_at) if account.created_at else None,
    )


class SQLAlchemyAccountDirectory(AccountDirectory):
    """
    Reference :class:`AccountDirectory` over the ``accounts`` table.

    The unique constraint on ``email`` is what turns a registration race into
    :class:`DuplicateAccountError`.
    """

    def find_by_email(self, email: str) -> AccountView | None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                account = uow.accounts.get_by_email(email)
                return _to_view(account) if account is not None else None
        except OperationalError as exc:
            raise TransientError() from exc

    def get(self, account_id: str) -> AccountView | None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                account = uow.accounts.get(account_id)
                return _to_view(account) if account is not None else None
        except OperationalError as exc:
            raise TransientError() from exc

    def create(self, fields: NewAccount) -> AccountView:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                account = uow.accounts.add(
                    Account(
                        email=fields.email,
                        password_hash=fields.password_hash,
                        first_name=fields.first_name,
                        last_name=fields.last_name,
                        role=fields.role,
                        is_active=True,
                    )
                )
        except IntegrityError as exc:
            raise DuplicateAccountError(fields.email) from exc
        except OperationalError as exc:
            raise TransientError() from exc
        # Attributes expired on commit; reading them reloads server defaults
        return _to_view(account)
