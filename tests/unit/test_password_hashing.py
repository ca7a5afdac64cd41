"""Tests for bcrypt password hashing."""

import pytest

from app.infrastructure.security import get_password_hash, verify_password

# Minimum bcrypt cost keeps the suite fast.
_ROUNDS = 4


def test_hash_verifies_and_is_not_plaintext() -> None:
    hashed = get_password_hash("SecurePass123!", rounds=_ROUNDS)
    assert hashed != "SecurePass123!"
    assert hashed.startswith("$2")
    assert verify_password("SecurePass123!", hashed)
    assert not verify_password("securepass123!", hashed)


def test_same_password_hashes_differently() -> None:
    assert get_password_hash("abc12345", rounds=_ROUNDS) != get_password_hash(
        "abc12345", rounds=_ROUNDS
    )


def test_long_passwords_differing_after_72_bytes_do_not_collide() -> None:
    base = "x" * 80
    hashed = get_password_hash(base + "a", rounds=_ROUNDS)
    assert not verify_password(base + "b", hashed)


def test_empty_password_rejected() -> None:
    with pytest.raises(ValueError):
        get_password_hash("")


def test_malformed_hash_never_matches() -> None:
    assert verify_password("anything", "not-a-bcrypt-hash") is False
