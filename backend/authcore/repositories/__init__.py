"""Repository package exposing persistence-layer access for the models."""

from __future__ import annotations

from authcore.repositories.account import AccountRepository
from authcore.repositories.base import BaseRepository
from authcore.repositories.refresh_token import RefreshTokenRepository

__all__ = ["AccountRepository", "BaseRepository", "RefreshTokenRepository"]
