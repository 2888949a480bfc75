"""
Password hashing helpers shared by the domain services and directory adapters.

bcrypt only reads the first 72 bytes of its input and current releases
reject anything longer, so every password is first reduced to the base64
form of its SHA-256 digest (44 bytes). The same reduction is applied when
hashing and on both comparison paths.
"""

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode()).digest())


# Hash of a throwaway password, compared against when no account exists so
# that login time does not reveal whether an email is registered.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(_prehash("dummy_password_for_timing_safety"), bcrypt.gensalt(12)).decode()


def hash_password(password: str, cost: int = 12) -> str:
    """Hash a password of any length using bcrypt with the given work factor."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=cost)).decode()


def check_password(password: str, password_hash: str | None) -> bool:
    """
    Constant-time comparison of a password against a bcrypt hash.

    A missing hash is compared against the dummy hash and always fails.
    """
    if password_hash is None:
        bcrypt.checkpw(_prehash(password), _DUMMY_BCRYPT_HASH.encode())
        return False
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False
