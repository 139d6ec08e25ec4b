"""Error taxonomy shared by services and routes.

Each error carries the HTTP status it maps to at the API boundary. Services
raise these; exception handlers in ``blogai.main`` render them as
``{"error": "<message>"}``.
"""

from fastapi import status


class AppError(Exception):
    """Base for all expected, client-facing errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, cause: Exception | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidCredentials(AppError):
    """Login failed. The message never says which half was wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class Unauthenticated(AppError):
    """Missing, invalid or expired session token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(AppError):
    """Authenticated but not allowed to act on this resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class SelfLockout(Forbidden):
    """Admin attempting to revoke their own admin role or delete themselves."""

    default_message = "Admins cannot remove their own admin access or account"


class QuotaExhausted(Forbidden):
    default_message = "No generations left. Upgrade to premium for more."


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    """Duplicate value for a unique field."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Already exists"


class UpstreamFailure(AppError):
    """Text-generation service failed; always retryable by the caller."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Text generation failed. Please try again."
    retryable = True
