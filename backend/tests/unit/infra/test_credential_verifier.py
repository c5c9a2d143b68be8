"""Unit tests for :class:`CredentialVerifier`."""

from __future__ import annotations

from authcore.infra.crypto.credential_verifier import CredentialVerifier


def test_hash_then_verify(verifier):
    stored = verifier.hash("S3cure!pass")

    assert stored.startswith("pbkdf2:sha256:1000$")
    assert verifier.verify("S3cure!pass", stored) is True
    assert verifier.verify("wrong", stored) is False


def test_same_secret_hashes_differently(verifier):
    assert verifier.hash("S3cure!pass") != verifier.hash("S3cure!pass")


def test_malformed_or_empty_hash_is_false(verifier):
    assert verifier.verify("anything", "") is False
    assert verifier.verify("anything", None) is False
    assert verifier.verify("anything", "not-a-hash") is False
    assert verifier.verify("anything", "bogus-method$salt$deadbeef") is False


def test_old_hashes_still_verify_after_method_change():
    legacy = CredentialVerifier(method="pbkdf2:sha256:1000").hash("S3cure!pass")
    assert CredentialVerifier(method="scrypt").verify("S3cure!pass", legacy) is True


def test_verify_dummy_never_matches(verifier):
    assert verifier.verify_dummy("dummy-secret-not-used") is False
    assert verifier.verify_dummy("anything else") is False
