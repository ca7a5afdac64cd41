"""ID and value generators (e.g. CUID)."""

import secrets
import string

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

_PASSWORD_SPECIALS = "!@#$%^&*-_=+"


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_transaction_id() -> str:
    """Correlation id for one provisioning run (``txn_<cuid>``)."""
    return f"txn_{generate_cuid()}"


def generate_temporary_password(length: int = 16) -> str:
    """Generate a password with at least one lowercase, uppercase, digit and special character.

    Used when an identity-provider account must be created without a
    caller-supplied password.
    """
    alphabet = string.ascii_letters + string.digits + _PASSWORD_SPECIALS
    rng = secrets.SystemRandom()
    chars = [
        rng.choice(string.ascii_lowercase),
        rng.choice(string.ascii_uppercase),
        rng.choice(string.digits),
        rng.choice(_PASSWORD_SPECIALS),
    ]
    chars.extend(rng.choice(alphabet) for _ in range(max(0, length - 4)))
    rng.shuffle(chars)
    return "".join(chars)
