"""Account model: the platform identity the auth core signs tokens for."""

from __future__ import annotations

from sqlalchemy import Boolean, Index, String, UniqueConstraint, true
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates

from authcore.core.extensions import db
from authcore.services._shared.ports.account_directory import AccountRole, normalize_email

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class Account(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Salted hash produced by the credential verifier.
    first_name, last_name : str
        Display names.
    role : AccountRole
        ``guest`` (default), ``host`` or ``admin``; copied into access claims.
    is_active : bool
        Deactivated accounts can neither log in nor refresh.
    """

    __tablename__ = "accounts"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[AccountRole] = mapped_column(
        SAEnum(
            AccountRole,
            name="account_role",
            values_callable=lambda enum: [m.value for m in enum],
        ),
        nullable=False,
        default=AccountRole.GUEST,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_accounts_email"),
        Index("ix_accounts_email", "email"),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = normalize_email(value)
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v
