"""Password hashing utilities using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0); passlib is not used.
bcrypt only looks at the first 72 bytes of a password, so longer inputs are
rejected at the schema layer (RegisterRequest.password max_length=72).
"""

import bcrypt

_ROUNDS = 12


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=_ROUNDS))
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against a bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
