# authcore/infra/crypto/credential_verifier.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash


@dataclass(slots=True)
class CredentialVerifier:
    """
    Salted, deliberately slow hashing of account secrets.

    Hashes are Werkzeug's ``method$salt$hash`` strings, so the method used at
    hashing time is recorded with the hash and old hashes keep verifying
    after ``method`` changes.

    :param method: Werkzeug hashing method (``scrypt`` by default).
    """

    method: str = "scrypt"
    _dummy_hash: str | None = None

    def hash(self, secret: str) -> str:
        return generate_password_hash(secret, method=self.method)

    def verify(self, secret: str, stored_hash: str | None) -> bool:
        """Return ``True`` iff ``secret`` matches; malformed hashes never raise."""
        if not stored_hash:
            return False
        try:
            return check_password_hash(stored_hash, secret)
        except ValueError:
            return False

    def verify_dummy(self, secret: str) -> bool:
        """
        Spend the same hashing cost as :meth:`verify` against a throwaway hash.

        Used on the unknown-account login path so response time does not
        reveal whether an email is registered. Always returns ``False``.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("dummy-secret-not-used")
        check_password_hash(self._dummy_hash, secret)
        return False
