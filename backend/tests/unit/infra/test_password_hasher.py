"""Tests for the werkzeug-backed password hasher."""

from __future__ import annotations

import pytest

from algoshield.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from algoshield.services._shared.errors import PasswordHashingError


def test_hash_is_salted_and_verifiable(hasher):
    first = hasher.hash("s3cret-pass")
    second = hasher.hash("s3cret-pass")

    assert first != "s3cret-pass"
    assert first != second
    assert hasher.verify(first, "s3cret-pass")
    assert hasher.verify(second, "s3cret-pass")


def test_verify_rejects_wrong_password(hasher):
    assert hasher.verify(hasher.hash("s3cret-pass"), "S3cret-pass") is False


def test_hash_carries_method(hasher):
    assert hasher.hash("s3cret-pass").startswith("pbkdf2:sha256:1000$")


def test_verify_malformed_verifier_is_false(hasher):
    assert hasher.verify("not-a-verifier", "anything") is False


def test_unknown_method_raises_hashing_error():
    with pytest.raises(PasswordHashingError):
        WerkzeugPasswordHasher("bogus").hash("s3cret-pass")
