"""
auth/passwords.py -- One-way salted password hashing (bcrypt).

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error. Direct bcrypt usage is simpler and has no
compatibility shim.

Work factor: BCRYPT_ROUNDS is a module constant (2^8 iterations). Changing it
affects new hashes only; existing hashes embed their own cost and salt, so
verify_password() keeps working across a change.

Layer rule: no imports from api/, core/, or ngo/.
"""

from __future__ import annotations

import logging

import bcrypt

from auth.errors import ValidationError

logger = logging.getLogger("ngomanager.auth")

BCRYPT_ROUNDS = 8

# bcrypt only reads the first 72 bytes of its input; newer releases reject
# anything longer outright.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Every call embeds a fresh random salt, so hashing the same input twice
    yields two different strings that both verify.

    Raises ValidationError on an empty or missing password. Rejecting empty
    input is the caller's job (request models enforce min_length); reaching
    this check means a code path skipped validation.

    Raises ValidationError when the UTF-8 encoding exceeds MAX_PASSWORD_BYTES.
    Request models reject such passwords first (422); this is the backstop for
    callers that bypass them, such as the create-admin command.
    """
    if not plain:
        raise ValidationError("Password must not be empty.")
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    checkpw compares in constant time. Malformed or empty hashes return False
    instead of raising. A password over MAX_PASSWORD_BYTES can never have been
    hashed, so it returns False as well.
    """
    if not plain or not hashed:
        return False
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        logger.warning("verify_password called with a malformed hash")
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. Login verifies against this when the username
# does not exist, so both branches pay the same bcrypt cost.
DUMMY_HASH: str = hash_password("ngomanager_timing_dummy")
