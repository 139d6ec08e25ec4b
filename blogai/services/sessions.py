"""Session verifier: validate bearer tokens and extract the subject identity."""

import logging
from collections.abc import Mapping
from typing import Any

import jwt

from blogai.core.security import TokenSigner
from blogai.schemas.auth import SubjectIdentity

logger = logging.getLogger(__name__)


def extract_subject(payload: Any) -> SubjectIdentity | None:
    """Return {id, role, email} from a decoded payload, or None if it has no usable id."""
    if not isinstance(payload, Mapping):
        return None
    raw_id = payload.get("id")
    if raw_id is None or isinstance(raw_id, bool):
        return None
    try:
        subject_id = int(raw_id)
    except (TypeError, ValueError):
        return None
    role = payload.get("role")
    if role not in ("admin", "user"):
        role = "user"
    email = payload.get("email")
    return SubjectIdentity(
        id=subject_id,
        role=role,
        email=email if isinstance(email, str) else None,
    )


class SessionVerifier:
    """
    Checks token signature and expiry against the server key.

    verify() never raises: malformed, tampered and expired tokens all yield None,
    and callers treat None uniformly as unauthenticated. There is no revocation;
    logging out only removes the client's cookie.
    """

    def __init__(self, signer: TokenSigner) -> None:
        self._signer = signer

    def verify(self, token: str | None) -> SubjectIdentity | None:
        if not token:
            return None
        try:
            payload = self._signer.decode(token)
        except jwt.PyJWTError as e:
            logger.debug("Session token rejected: %s", type(e).__name__)
            return None
        return extract_subject(payload)
