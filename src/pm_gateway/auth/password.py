"""bcrypt password hashing for user credentials.

Seeded protocol users (owner, oracle) carry a placeholder hash that no
password verifies against; their tokens are issued out of band.
"""

import bcrypt


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """True when ``plain`` matches ``hashed``; malformed hashes never match."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
