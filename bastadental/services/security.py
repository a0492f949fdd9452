"""Password hashing helpers."""

import logging

import bcrypt

from bastadental.errors import ValidationFailed

LOGGER = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a plain-text password with a fresh salt."""

    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationFailed("Password must be at most 72 bytes long")
    hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a candidate password against a stored hash."""

    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError as exc:
        LOGGER.error("Password verification error: %s", exc)
        return False
