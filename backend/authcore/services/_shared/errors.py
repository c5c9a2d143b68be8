"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. Each carries a stable ``code`` so the transport layer can surface a
specific taxonomy value without the message revealing internals.

The translation to HTTP responses (RFC 7807) is handled by
``authcore/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Messages are safe to show to clients: no storage ids, no token values.
    """

    code = "bad_request"
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ConflictError(ServiceError):
    """
    Registration collided with an existing account.

    The message is deliberately generic: it never says which field clashed.
    """

    code = "conflict"
    default_message = "Account already exists"


class InvalidCredentialsError(ServiceError):
    """Unknown email or wrong secret; the two cases are indistinguishable."""

    code = "invalid_credentials"
    default_message = "Invalid credentials"


class AccountDeactivatedError(ServiceError):
    """The secret matched but the account is disabled."""

    code = "account_deactivated"
    default_message = "Account is deactivated"


class InvalidRefreshTokenError(ServiceError):
    """Refresh token unknown, expired or already used/revoked (collapsed)."""

    code = "invalid_refresh_token"
    default_message = "Invalid refresh token"


class MalformedTokenError(ServiceError):
    """The presented token cannot be parsed at all."""

    code = "malformed_token"
    default_message = "Malformed token"


class TransientError(ServiceError):
    """
    Storage or I/O failure. Every operation either fully committed or left
    state untouched, so the caller may retry.
    """

    code = "transient_error"
    default_message = "Temporary failure, please retry"
