"""Unit tests for :meth:`BaseService.translate_exceptions`."""

from __future__ import annotations

import pytest
from authcore.core import errors as api_errors
from authcore.services._shared.base import BaseService
from authcore.services._shared.errors import (
    AccountDeactivatedError,
    ConflictError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    MalformedTokenError,
    ServiceError,
    TransientError,
)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (ConflictError(), 409, "conflict"),
        (InvalidCredentialsError(), 401, "invalid_credentials"),
        (AccountDeactivatedError(), 403, "account_deactivated"),
        (InvalidRefreshTokenError(), 401, "invalid_refresh_token"),
        (MalformedTokenError(), 400, "malformed_token"),
        (TransientError(), 503, "transient_error"),
        (ServiceError("nope"), 400, "bad_request"),
    ],
)
def test_service_errors_map_to_api_errors(exc, status, code):
    translated = BaseService().translate_exceptions(exc)

    assert isinstance(translated, api_errors.APIError)
    assert translated.status_code == status
    assert translated.code == code
    assert translated.message == exc.message


def test_unknown_exceptions_pass_through():
    exc = KeyError("x")
    assert BaseService().translate_exceptions(exc) is exc


def test_now_utc_uses_injected_clock(clock):
    assert BaseService(clock=clock).now_utc() == clock()
