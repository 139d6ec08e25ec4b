"""Password hashing and session token signing/verification."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Session tokens are valid for a fixed 7 days; there is no server-side revocation.
SESSION_TOKEN_TTL = timedelta(days=7)

EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (constant-time compare in bcrypt)."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class TokenSigner:
    """Holds the process-wide symmetric key; built once from settings at startup."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("Signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm

    def sign(self, claims: dict[str, Any], now: datetime | None = None) -> tuple[str, datetime]:
        """Sign claims with iat/exp added; returns (token, expires_at)."""
        issued_at = now or datetime.now(UTC)
        expires_at = issued_at + SESSION_TOKEN_TTL
        payload: dict[str, Any] = {
            **claims,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        return token, expires_at

    def decode(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a token; return its payload.
        Raises jwt.PyJWTError on invalid or expired token.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self.algorithm],
            options={"require": ["exp", "iat"]},
        )
