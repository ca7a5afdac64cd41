"""Password hashing for tenant users (bcrypt over a SHA-256 pre-hash).

bcrypt ignores input past 72 bytes; hashing the SHA-256 digest first keeps
every character of a long password significant.
"""

import base64
import hashlib

import bcrypt

BCRYPT_ROUNDS = 12


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def get_password_hash(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return bcrypt hash of password. CPU bound: call via asyncio.to_thread."""
    if not password:
        raise ValueError("Password must not be empty")
    hashed = bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches hashed_password; malformed hashes never match."""
    try:
        return bool(
            bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
        )
    except (ValueError, TypeError):
        return False
