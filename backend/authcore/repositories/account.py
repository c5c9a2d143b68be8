"""Account repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from authcore.models.account import Account
from authcore.repositories.base import BaseRepository
from authcore.services._shared.ports.account_directory import normalize_email


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    It NEVER handles tokens or password verification, only DB-level lookup
    and creation.
    """

    model = Account

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: Account instance or ``None`` when not found.
        :rtype: Account | None
        """
        stmt = select(Account).where(Account.email == normalize_email(email))
        return cast(Account | None, self.session.execute(stmt).scalars().first())

