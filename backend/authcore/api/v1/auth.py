"""Authentication endpoints using the service layer."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from flask import Blueprint
from flask_jwt_extended import get_jwt

from authcore.api.deps import get_issuer, json_body, json_response, require_auth, timing
from authcore.schemas import (
    AuthResultSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    WhoAmISchema,
)
from authcore.services._shared.errors import ServiceError
from authcore.services.auth import (
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenIssuer,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
auth_result_schema = AuthResultSchema()
token_schema = TokenPairSchema()
whoami_schema = WhoAmISchema()

T = TypeVar("T")


def _run(issuer: TokenIssuer, call: Callable[[], T]) -> T:
    """Invoke a service call, translating service errors into API errors."""
    try:
        return call()
    except ServiceError as exc:
        raise issuer.translate_exceptions(exc) from exc


@bp.post("/register")
@timing
def register():
    """Create an account and return it with its first token pair."""

    data = register_schema.load(json_body())
    issuer = get_issuer()
    result = _run(issuer, lambda: issuer.register(RegisterIn(**data)))
    return json_response({"data": auth_result_schema.dump(result)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(json_body())
    issuer = get_issuer()
    result = _run(issuer, lambda: issuer.login(LoginIn(**data)))
    return json_response({"data": auth_result_schema.dump(result)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token: the presented one is consumed, a new pair returned."""

    data = refresh_schema.load(json_body())
    issuer = get_issuer()
    pair = _run(issuer, lambda: issuer.refresh(RefreshIn(**data)))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token. Unknown or already revoked tokens also succeed."""

    data = logout_schema.load(json_body())
    issuer = get_issuer()
    _run(issuer, lambda: issuer.logout(LogoutIn(**data)))
    return "", 204


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the identity carried by the verified access token."""

    return json_response({"data": whoami_schema.dump(get_jwt())})
