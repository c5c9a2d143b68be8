# authcore/services/auth/service.py
from __future__ import annotations

import logging
from typing import Any

from authcore.infra.crypto.credential_verifier import CredentialVerifier
from authcore.infra.jwt.token_codec import ACCESS_TOKEN_TYPE, JWTTokenCodec
from authcore.services._shared.base import BaseService, ServiceContext
from authcore.services._shared.errors import (
    AccountDeactivatedError,
    ConflictError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    MalformedTokenError,
)
from authcore.services._shared.ports import (
    AccountDirectory,
    AccountRole,
    AccountView,
    DuplicateAccountError,
    NewAccount,
    normalize_email,
)
from authcore.services.auth.dto import (
    AccountPublicOut,
    AuthResultOut,
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from authcore.services.auth.ledger import LedgerError, RefreshTokenLedger

log = logging.getLogger(__name__)


class TokenIssuer(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Access tokens are short-lived JWTs signed by :class:`JWTTokenCodec`;
    refresh tokens are opaque single-use strings tracked by
    :class:`RefreshTokenLedger`. Every refresh consumes exactly one ledger
    record and issues exactly one new record.

    Ledger failures (not found / expired / revoked) are collapsed into a
    single :class:`InvalidRefreshTokenError`; the specific reason only reaches
    the logs.
    """

    def __init__(
        self,
        *,
        accounts: AccountDirectory,
        ledger: RefreshTokenLedger,
        codec: JWTTokenCodec,
        verifier: CredentialVerifier,
        token_cfg: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param accounts: Account store port.
        :param ledger: Refresh-token ledger.
        :param codec: Access-token signer.
        :param verifier: Secret hashing/verification.
        :param token_cfg: Access/Refresh expiry configuration.
        """
        super().__init__(ctx=ctx)
        self.accounts = accounts
        self.ledger = ledger
        self.codec = codec
        self.verifier = verifier
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create an account and sign it in.

        :raises ConflictError: Email already registered (case-insensitive).
        """
        email = normalize_email(dto.email)
        if self.accounts.find_by_email(email) is not None:
            raise ConflictError()

        fields = NewAccount(
            email=email,
            password_hash=self.verifier.hash(dto.password),
            first_name=dto.first_name.strip(),
            last_name=dto.last_name.strip(),
            role=AccountRole(dto.role) if dto.role else AccountRole.GUEST,
        )
        try:
            account = self.accounts.create(fields)
        except DuplicateAccountError as exc:
            # Lost a race against a concurrent registration of the same email
            raise ConflictError() from exc

        log.info("account registered", extra={"account_id": account.id})
        return AuthResultOut(
            account=AccountPublicOut.from_view(account),
            tokens=self._issue_token_pair(account),
        )

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :raises InvalidCredentialsError: Unknown email or wrong secret.
        :raises AccountDeactivatedError: Secret matched but account disabled.
        """
        account = self.accounts.find_by_email(normalize_email(dto.email))
        if account is None:
            self.verifier.verify_dummy(dto.password)
            self._login_rejected("unknown_account")
            raise InvalidCredentialsError()
        if not self.verifier.verify(dto.password, account.password_hash):
            self._login_rejected("bad_secret", account.id)
            raise InvalidCredentialsError()
        if not account.is_active:
            self._login_rejected("account_deactivated", account.id)
            raise AccountDeactivatedError()

        return AuthResultOut(
            account=AccountPublicOut.from_view(account),
            tokens=self._issue_token_pair(account),
        )

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Consume a refresh token and emit a new token pair.

        :raises MalformedTokenError: Empty or non-string token.
        :raises InvalidRefreshTokenError: Unknown, expired or already used token,
            or its account is gone or deactivated.
        """
        token = dto.refresh_token
        if not isinstance(token, str) or not token.strip():
            raise MalformedTokenError()

        try:
            record = self.ledger.validate_and_consume(token)
        except LedgerError as exc:
            log.info("refresh rejected", extra={"reason": exc.reason})
            raise InvalidRefreshTokenError() from exc

        account = self.accounts.get(record.account_id)
        if account is None or not account.is_active:
            reason = "account_missing" if account is None else "account_deactivated"
            log.info(
                "refresh rejected",
                extra={"reason": reason, "account_id": record.account_id},
            )
            raise InvalidRefreshTokenError()

        return self._issue_token_pair(account)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """Revoke the refresh token; unknown or reused tokens are accepted silently."""
        token = dto.refresh_token
        if isinstance(token, str) and token:
            self.ledger.revoke(token)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _login_rejected(self, reason: str, account_id: str | None = None) -> None:
        log.info(
            "login rejected",
            extra={
                "reason": reason,
                "account_id": account_id,
                "remote_addr": self.ctx.remote_addr,
            },
        )

    def _issue_token_pair(self, account: AccountView) -> TokenPairOut:
        claims: dict[str, Any] = {
            "sub": account.id,
            "role": AccountRole(account.role).value,
        }
        access = self.codec.sign(claims, self.cfg.access_expires, token_type=ACCESS_TOKEN_TYPE)
        record = self.ledger.issue(account.id)
        return TokenPairOut(
            access_token=access,
            refresh_token=record.token,
            expires_in=int(self.cfg.access_expires.total_seconds()),
        )
