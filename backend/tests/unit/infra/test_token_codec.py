"""Unit tests for :class:`JWTTokenCodec` (HS256 sign/verify with an injected clock)."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from authcore.infra.jwt.token_codec import (
    JWTTokenCodec,
    TokenCodecError,
    TokenExpired,
    TokenMalformed,
    TokenSignatureInvalid,
)

from tests.conftest import TEST_SECRET


def test_sign_then_verify_returns_claims(codec, clock):
    token = codec.sign({"sub": "acc-1", "role": "host"}, timedelta(minutes=15))

    claims = codec.verify(token)

    issued = int(clock().timestamp())
    assert claims["sub"] == "acc-1"
    assert claims["role"] == "host"
    assert claims["iat"] == issued
    assert claims["nbf"] == issued
    assert claims["exp"] == issued + 15 * 60
    assert claims["type"] == "access"
    assert claims["fresh"] is False
    assert len(claims["jti"]) == 32


def test_subject_is_stringified(codec):
    claims = codec.verify(codec.sign({"sub": 42, "role": "guest"}, timedelta(minutes=1)))
    assert claims["sub"] == "42"


def test_each_token_gets_its_own_jti(codec):
    a = codec.verify(codec.sign({"sub": "x"}, timedelta(minutes=1)))
    b = codec.verify(codec.sign({"sub": "x"}, timedelta(minutes=1)))
    assert a["jti"] != b["jti"]


def test_expired_at_exact_expiry_instant(codec, clock):
    token = codec.sign({"sub": "acc-1", "role": "guest"}, timedelta(minutes=15))

    clock.advance(minutes=15)

    with pytest.raises(TokenExpired):
        codec.verify(token)


def test_valid_one_second_before_expiry(codec, clock):
    token = codec.sign({"sub": "acc-1", "role": "guest"}, timedelta(minutes=15))
    clock.advance(minutes=15, seconds=-1)
    assert codec.verify(token)["sub"] == "acc-1"


def test_wrong_secret_is_invalid_signature(codec, clock):
    other = JWTTokenCodec(secret="another-secret-key-that-is-long-enough!!", clock=clock)
    token = other.sign({"sub": "acc-1"}, timedelta(minutes=1))

    with pytest.raises(TokenSignatureInvalid):
        codec.verify(token)


def test_tampered_payload_is_invalid_signature(codec):
    token = codec.sign({"sub": "acc-1", "role": "guest"}, timedelta(minutes=1))
    header, _payload, signature = token.split(".")
    forged = jwt.encode({"sub": "acc-1", "role": "admin"}, "x" * 32, algorithm="HS256")
    tampered = ".".join([header, forged.split(".")[1], signature])

    with pytest.raises(TokenSignatureInvalid):
        codec.verify(tampered)


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", None])
def test_garbage_is_malformed(codec, garbage):
    with pytest.raises(TokenMalformed):
        codec.verify(garbage)


def test_missing_required_claim_is_malformed(codec, clock):
    issued = int(clock().timestamp())
    token = jwt.encode({"sub": "acc-1", "iat": issued}, TEST_SECRET, algorithm="HS256")

    with pytest.raises(TokenMalformed):
        codec.verify(token)


def test_all_failures_share_a_base_class():
    for exc in (TokenSignatureInvalid, TokenExpired, TokenMalformed):
        assert issubclass(exc, TokenCodecError)


def test_empty_secret_is_rejected():
    with pytest.raises(ValueError):
        JWTTokenCodec(secret="")


def test_tokens_are_accepted_by_flask_jwt_extended(app):
    """Access tokens signed by the codec verify with Flask-JWT-Extended's decoder."""
    from flask_jwt_extended import decode_token

    with app.app_context():
        codec = JWTTokenCodec(
            secret=app.config["JWT_SECRET_KEY"], algorithm=app.config["JWT_ALGORITHM"]
        )
        token = codec.sign({"sub": "acc-9", "role": "admin"}, timedelta(minutes=5))
        decoded = decode_token(token)

    assert decoded["sub"] == "acc-9"
    assert decoded["role"] == "admin"
    assert decoded["type"] == "access"
