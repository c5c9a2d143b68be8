# authcore/infra/jwt/token_codec.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

ACCESS_TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ("sub", "iat", "exp")


class TokenCodecError(Exception):
    """Base class for every verification failure of the codec."""


class TokenSignatureInvalid(TokenCodecError):
    """Signature does not match the configured secret."""


class TokenExpired(TokenCodecError):
    """The ``exp`` claim is at or before the current time."""


class TokenMalformed(TokenCodecError):
    """The token cannot be parsed or misses a required claim."""


def _system_clock() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class JWTTokenCodec:
    """
    Stateless HS256 signer/verifier for access tokens.

    Tokens carry ``sub``, ``role``, ``iat``, ``nbf``, ``exp``, ``jti``,
    ``type`` and ``fresh`` so that Flask-JWT-Extended accepts them in
    ``verify_jwt_in_request`` when it shares the same secret and algorithm.

    :param secret: Symmetric signing key, loaded once at startup.
    :param algorithm: JWS algorithm (HMAC family).
    :param clock: Callable returning aware UTC datetimes.

    .. note::
       Rotating ``secret`` invalidates every outstanding token.
    """

    secret: str
    algorithm: str = "HS256"
    clock: Callable[[], datetime] = field(default=_system_clock)

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("JWT secret must not be empty")

    def sign(
        self,
        claims: Mapping[str, Any],
        ttl: timedelta,
        *,
        token_type: str = ACCESS_TOKEN_TYPE,
    ) -> str:
        """
        Sign ``claims`` into a compact JWS valid for ``ttl``.

        :param claims: Application claims (at least ``sub``).
        :param ttl: Token lifetime.
        :param token_type: Value of the ``type`` claim.
        :returns: Encoded token string.
        """
        issued = int(self.clock().timestamp())
        payload: dict[str, Any] = {
            "fresh": False,
            **claims,
            "iat": issued,
            "nbf": issued,
            "exp": issued + int(ttl.total_seconds()),
            "jti": uuid4().hex,
            "type": token_type,
        }
        payload["sub"] = str(payload["sub"])
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry and return the claim set.

        :raises TokenMalformed: Not a JWT, or a required claim is missing.
        :raises TokenSignatureInvalid: Signature mismatch.
        :raises TokenExpired: ``now >= exp`` according to the injected clock.
        """
        if not isinstance(token, str) or not token:
            raise TokenMalformed("token must be a non-empty string")
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    "require": list(REQUIRED_CLAIMS),
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise TokenSignatureInvalid("signature verification failed") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenMalformed(str(exc)) from exc

        try:
            expires = int(claims["exp"])
        except (TypeError, ValueError) as exc:
            raise TokenMalformed("exp claim is not an integer") from exc
        if int(self.clock().timestamp()) >= expires:
            raise TokenExpired("token has expired")
        return claims
