# socialride/core/security.py
"""
Local credential helpers: username normalization and password hashing.

bcrypt salts every hash and truncates input to 72 bytes, so the same
truncation is applied explicitly on both hashing and checking.
"""

import bcrypt

BCRYPT_ROUNDS = 12

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 64


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash ("$2b$...") for the password."""
    pw_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


# Checked against when the username is unknown, so a miss costs the
# same bcrypt work as a wrong password.
DUMMY_PASSWORD_HASH = hash_password("socialride-unknown-user")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:72], password_hash.encode("utf-8")
        )
    except (ValueError, TypeError):
        return False


def normalize_username(username: str) -> str:
    """Usernames are stored and compared stripped and lower-cased."""
    return username.strip().lower()
