"""Password hashing and opaque session tokens."""

import hashlib
import secrets

import bcrypt

from bugsage.core.config import settings

USERNAME_MAX_LEN = 50
EMAIL_MAX_LEN = 100
PASSWORD_MAX_LEN = 128

# Bytes of randomness in a session token (hex-encoded for the cookie).
SESSION_TOKEN_BYTES = 32


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_session_token() -> str:
    """Return a new random token for the session cookie."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def hash_session_token(token: str) -> str:
    """Digest stored server side so a leaked sessions table cannot be replayed."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
