"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccountSchema,
    AuthResultSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    WhoAmISchema,
    validate_strong_password,
)

__all__ = [
    "AccountSchema",
    "AuthResultSchema",
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "WhoAmISchema",
    "validate_strong_password",
]
