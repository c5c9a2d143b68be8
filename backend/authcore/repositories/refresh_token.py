"""Refresh-token repository with a storage-level compare-and-set."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, or_, select, update

from authcore.models.refresh_token import RefreshToken
from authcore.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken` rows."""

    model = RefreshToken

    def get_by_token(self, token: str) -> RefreshToken | None:
        """Fetch a row by its token value, bypassing the identity map cache.

        :param token: Exact token string.
        :returns: Row or ``None``.
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(populate_existing=True)
        )
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def revoke_if_valid(self, token: str, now: datetime) -> bool:
        """Flip ``revoked`` only when the row is unrevoked and unexpired.

        A single conditional ``UPDATE``: concurrent callers serialize on the
        row and at most one of them sees ``rowcount == 1``.

        :returns: ``True`` iff this call performed the transition.
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token == token,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def revoke(self, token: str) -> bool:
        """Set ``revoked`` regardless of expiry. :returns: True if the row exists."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token)
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount > 0

    def delete_expired_or_revoked(self, now: datetime) -> int:
        stmt = (
            delete(RefreshToken)
            .where(or_(RefreshToken.revoked.is_(True), RefreshToken.expires_at < now))
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
