# authcore/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from authcore.core import errors as api_errors
from authcore.services._shared.errors import (
    AccountDeactivatedError,
    ConflictError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    MalformedTokenError,
    ServiceError,
    TransientError,
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default wall clock (timezone-aware UTC)."""
    return datetime.now(UTC)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (request ids, client address).

    :param request_id: Correlation id for logging/tracing.
    :param remote_addr: Client address as seen after ProxyFix.
    """

    request_id: str | None = None
    remote_addr: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Hold the request-scoped :class:`ServiceContext` and an injectable clock.
    * Centralize translation of service errors into API errors.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; persistence goes through ports.
    """

    def __init__(self, *, ctx: ServiceContext | None = None, clock: Clock | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context.
        :type ctx: ServiceContext | None
        :param clock: Callable returning aware UTC datetimes (tests inject one).
        :type clock: Callable[[], datetime] | None
        """
        self.ctx = ctx or ServiceContext()
        self._clock = clock or utc_now

    def now_utc(self) -> datetime:
        return self._clock()

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, ConflictError):
            # → 409 Conflict
            return api_errors.Conflict(exc.message, code=exc.code)

        if isinstance(exc, InvalidCredentialsError | InvalidRefreshTokenError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(exc.message, code=exc.code)

        if isinstance(exc, AccountDeactivatedError):
            # → 403 Forbidden
            return api_errors.Forbidden(exc.message, code=exc.code)

        if isinstance(exc, TransientError):
            # → 503 Service Unavailable
            return api_errors.ServiceUnavailable(exc.message, code=exc.code)

        if isinstance(exc, MalformedTokenError):
            # → 400 Bad Request
            return api_errors.APIError(message=exc.message, status_code=400, code=exc.code)

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=exc.message, status_code=400, code="bad_request")

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
