"""
Password hashing with bcrypt.
"""

import bcrypt

from community.constants import BCRYPT_MAX_PASSWORD_BYTES


def _encode(password: str) -> bytes:
    # bcrypt rejects or ignores bytes past 72; truncate the same way on hash and check
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
