"""
Abstract Unit of Work contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authcore.repositories import AccountRepository, RefreshTokenRepository


class UnitOfWork(ABC):
    """
    One transaction spanning the account and refresh-token repositories.

    Store adapters open a unit per port call so a consume either commits its
    revocation or leaves the row untouched.
    """

    accounts: AccountRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
