"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

import re

from marshmallow import Schema, ValidationError, fields, validate

from authcore.services._shared.ports import AccountRole

SPECIAL_CHARS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")
PASSWORD_RULES = (
    re.compile(r"[A-Z]"),
    re.compile(r"[a-z]"),
    re.compile(r"\d"),
    SPECIAL_CHARS,
)
PASSWORD_MESSAGE = (
    "Password must be at least 8 characters and contain at least one uppercase "
    "letter, one lowercase letter, one number, and one special character"
)


def validate_strong_password(value: str) -> None:
    """Reject secrets shorter than 8 characters or missing a character class."""
    if len(value) < 8 or not all(rule.search(value) for rule in PASSWORD_RULES):
        raise ValidationError(PASSWORD_MESSAGE)


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True,
        validate=[validate.Length(max=128), validate_strong_password],
    )
    first_name = fields.String(required=True, validate=validate.Length(min=2, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=2, max=100))
    role = fields.Enum(AccountRole, by_value=True, load_default=None)


class LoginSchema(Schema):
    """Input payload for authenticating an account.

    No strength rules here: a login attempt must fail as invalid credentials,
    not as a validation error that hints at the password policy.
    """

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload carrying the refresh token to rotate."""

    refresh_token = fields.String(required=True)


class LogoutSchema(Schema):
    """Input payload carrying the refresh token to revoke."""

    refresh_token = fields.String(required=True)


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")
    expires_in = fields.Integer(required=True)


class AccountSchema(Schema):
    """Public representation of an account."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(required=True)
    role = fields.String(required=True)
    is_active = fields.Boolean(required=True)
    created_at = fields.DateTime(allow_none=True)


class AuthResultSchema(Schema):
    """Response payload for register/login: account plus token pair."""

    account = fields.Nested(AccountSchema, required=True)
    tokens = fields.Nested(TokenPairSchema, required=True)


class WhoAmISchema(Schema):
    """Claims of the verified access token presented to ``/auth/me``."""

    sub = fields.String(required=True, data_key="id")
    role = fields.String(required=True)
    exp = fields.Integer(required=True, data_key="expires_at")
