"""Unit tests for the argon2id :class:`SecretHasher`."""

from __future__ import annotations

import pytest

from contacts_auth.core.security import HashingError, SecretHasher


@pytest.fixture()
def fast() -> SecretHasher:
    return SecretHasher(time_cost=1, memory_cost=8, parallelism=1)


def test_hash_is_salted_argon2id(fast):
    first = fast.hash("s3cret-value")
    second = fast.hash("s3cret-value")

    assert first.startswith("$argon2id$")
    assert first != second  # fresh salt per call
    assert "s3cret-value" not in first


def test_verify_accepts_match_and_rejects_mismatch(fast):
    encoded = fast.hash("correct horse")

    assert fast.verify(encoded, "correct horse") is True
    assert fast.verify(encoded, "battery staple") is False


def test_verify_accepts_bytes(fast):
    encoded = fast.hash(b"raw-bytes")
    assert fast.verify(encoded, b"raw-bytes") is True


def test_verify_malformed_hash_raises_hashing_error(fast):
    with pytest.raises(HashingError):
        fast.verify("not-an-argon2-hash", "whatever")


def test_verify_dummy_always_false(fast):
    assert fast.verify_dummy("anything") is False
    # Dummy hash is computed once and reused
    cached = fast._dummy_hash
    fast.verify_dummy("again")
    assert fast._dummy_hash == cached


def test_needs_rehash_detects_parameter_upgrade(fast):
    stronger = SecretHasher(time_cost=2, memory_cost=16, parallelism=1)
    weak_hash = fast.hash("pw")

    assert stronger.needs_rehash(weak_hash) is True
    assert fast.needs_rehash(weak_hash) is False


def test_needs_rehash_malformed_hash_raises(fast):
    with pytest.raises(HashingError):
        fast.needs_rehash("garbage")


def test_from_config_reads_argon2_keys():
    hasher = SecretHasher.from_config(
        {"ARGON2_TIME_COST": 2, "ARGON2_MEMORY_COST": 16, "ARGON2_PARALLELISM": 1}
    )
    encoded = hasher.hash("pw")

    assert "m=16,t=2,p=1" in encoded
