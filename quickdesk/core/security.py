"""Account credentials: bcrypt password hashes and signed JWT access tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from quickdesk.core.config import settings
from quickdesk.models.base import MAX_ID

BCRYPT_ROUNDS = 12
# bcrypt ignores input past 72 bytes; validation caps passwords well below that in characters.
BCRYPT_MAX_BYTES = 72

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
NAME_MIN_LEN = 2
NAME_MAX_LEN = 255


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return a salted bcrypt hash. The cost is stored in the hash, so verify_password needs no rounds."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """False for a wrong password or a malformed stored hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: int, role: str, expires_minutes: int | None = None) -> str:
    """Signed token whose sub is the user id; role is informational, the DB row is authoritative."""
    issued_at = datetime.now(UTC)
    lifetime = timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.JWT_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry and return the claims. Raises jwt.PyJWTError otherwise."""
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )


def user_id_from_token(token: str) -> int:
    """User id carried in sub. A missing, non-numeric or out-of-range sub raises jwt.InvalidTokenError."""
    sub = decode_access_token(token).get("sub")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise jwt.InvalidTokenError("Token subject is not a user id") from None
    if not 1 <= user_id <= MAX_ID:
        raise jwt.InvalidTokenError("Token subject is not a user id")
    return user_id
