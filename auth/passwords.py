"""
auth/passwords.py -- Password hashing and the bcrypt credential verifier.

Passwords: bcrypt used directly (no passlib wrapper). bcrypt only reads the
first 72 bytes of its input, and bcrypt 5 raises ValueError beyond that.
hash_password() enforces MAX_PASSWORD_BYTES itself so every caller (API
models, CLI, ConfigStore) fails the same way instead of truncating.

The admin username is stored as a bcrypt hash too (see auth/config_store.py),
so the same verifier serves both comparisons in authenticate_admin().

Layer rule: no imports from api/, albums/, or audit/.
"""

from __future__ import annotations

import bcrypt

MAX_PASSWORD_BYTES = 72


def fits_bcrypt(plain: str) -> bool:
    return len(plain.encode("utf-8")) <= MAX_PASSWORD_BYTES


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext.

    Raises ValueError for inputs over MAX_PASSWORD_BYTES (UTF-8). The API
    models reject those with a 422 before they get here.
    """
    if not fits_bcrypt(plain):
        raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes.")
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext matches the bcrypt hash.

    An empty or malformed hash never matches -- bcrypt raises ValueError
    on those, which is a failed check, not an error. Neither does a
    plaintext over MAX_PASSWORD_BYTES, since hash_password() never accepts one.
    """
    if not hashed or not fits_bcrypt(plain):
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash. Computed once at module load so the first
# login attempt is not measurably slower than subsequent ones.
DUMMY_HASH: str = hash_password("gallerygate_timing_dummy")


class BcryptVerifier:
    """CredentialVerifier backed by bcrypt."""

    def verify(self, plaintext: str, hashed: str) -> bool:
        return verify_password(plaintext, hashed)
