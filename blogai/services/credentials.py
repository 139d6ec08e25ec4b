"""Credential issuer: signup and login (email + password to a signed session token)."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from blogai.core.errors import Conflict, InvalidCredentials, ValidationError
from blogai.core.security import (
    BCRYPT_ROUNDS,
    EMAIL_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    TokenSigner,
    hash_password,
    verify_password,
)
from blogai.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    account: User
    expires_at: datetime


class CredentialIssuer:
    """
    Authenticates email/password pairs against the store and mints session tokens.

    Stateless: issuing a token never writes to the store.
    """

    def __init__(
        self,
        signer: TokenSigner,
        free_generations: int,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ) -> None:
        self._signer = signer
        self._free_generations = free_generations
        self._bcrypt_rounds = bcrypt_rounds

    def hash_secret(self, secret: str) -> str:
        return hash_password(secret, rounds=self._bcrypt_rounds)

    def issue(self, db: Session, email: str, secret: str) -> IssuedToken:
        """
        Look up the account by exact email and check the secret against its bcrypt hash.

        Raises ValidationError for blank input and InvalidCredentials for an unknown
        email or wrong secret (same message for both).
        """
        if not email or not email.strip() or not secret:
            raise ValidationError("Email and password are required")

        user = db.query(User).filter(User.email == email).first()
        if user is None or not verify_password(secret, user.password_hash):
            logger.info("Login failed", extra={"email": email})
            raise InvalidCredentials()

        token, expires_at = self._signer.sign(
            {"id": user.id, "email": user.email, "role": user.role}
        )
        logger.info("Login succeeded", extra={"user_id": user.id})
        return IssuedToken(token=token, account=user, expires_at=expires_at)

    def register(
        self,
        db: Session,
        *,
        email: str,
        secret: str,
        name: str | None = None,
        role: str = "user",
    ) -> User:
        """Create an account with a hashed secret and the free generation allotment."""
        if not email or not email.strip() or not secret:
            raise ValidationError("Email and password are required")
        if len(email) > EMAIL_MAX_LEN:
            raise ValidationError("Invalid email length.")
        if not (PASSWORD_MIN_LEN <= len(secret) <= PASSWORD_MAX_LEN):
            raise ValidationError("Invalid password length.")
        if role not in ("admin", "user"):
            raise ValidationError("Invalid role.")

        existing = db.query(User).filter(User.email == email).first()
        if existing is not None:
            raise Conflict("User already exists")

        user = User(
            email=email,
            name=name,
            password_hash=self.hash_secret(secret),
            role=role,
            subscription="free",
            generations_left=self._free_generations,
            generations_total=self._free_generations,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Account created", extra={"user_id": user.id, "role": role})
        return user
