"""Signup, login/logout and the session dependencies (get_current_user, require_admin)."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blogai.core.context import AppContext, get_context, get_db
from blogai.core.errors import Forbidden, Unauthenticated
from blogai.core.security import SESSION_TOKEN_TTL
from blogai.models import User
from blogai.schemas.auth import (
    AccountOut,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RequestAuth,
    SignupRequest,
    SignupResponse,
    SubjectIdentity,
)
from blogai.services.accounts import get_own_account

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_request_auth(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    context: Annotated[AppContext, Depends(get_context)],
) -> RequestAuth:
    """
    Read the bearer token once per request: Authorization header first, then the
    auth cookie. subject is None when the token is missing, invalid or expired.
    """
    token: str | None = None
    if credentials is not None and credentials.credentials:
        token = credentials.credentials
    if not token:
        token = request.cookies.get(context.settings.AUTH_COOKIE_NAME)
    subject = context.verifier.verify(token) if token else None
    return RequestAuth(token=token, subject=subject)


def get_current_user(
    auth: Annotated[RequestAuth, Depends(get_request_auth)],
    db: Annotated[Session, Depends(get_db)],
) -> SubjectIdentity:
    """Dependency: require a valid session and return the subject with its stored role. Raises 401 otherwise."""
    if auth.subject is None:
        raise Unauthenticated("Not authenticated" if auth.token is None else "Invalid or expired token")
    user = db.get(User, auth.subject.id)
    if user is None:
        raise Unauthenticated("User not found")
    return SubjectIdentity(id=user.id, role=user.role, email=user.email)


def require_admin(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
) -> SubjectIdentity:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if not current_user.is_admin:
        raise Forbidden("Admin access required")
    return current_user


def _set_auth_cookie(response: Response, context: AppContext, token: str) -> None:
    response.set_cookie(
        key=context.settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=context.settings.APP_ENV == "prod",
        max_age=int(SESSION_TOKEN_TTL.total_seconds()),
        path="/",
        samesite="lax",
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> SignupResponse:
    """Create an account. Returns 409 if the email is already registered."""
    user = context.issuer.register(db, email=body.email, secret=body.password, name=body.name)
    background_tasks.add_task(context.mailer.send_welcome, user)
    return SignupResponse(user=AccountOut.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> LoginResponse:
    """
    Authenticate with email and password. Sets the httpOnly auth cookie and also
    returns the token for clients that send it as: Authorization: Bearer <access_token>
    """
    issued = context.issuer.issue(db, body.email, body.password)
    _set_auth_cookie(response, context, issued.token)
    return LoginResponse(
        user=AccountOut.model_validate(issued.account),
        access_token=issued.token,
        expires_at=issued.expires_at,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    context: Annotated[AppContext, Depends(get_context)],
) -> MessageResponse:
    """Delete the auth cookie. The token itself stays valid until it expires."""
    response.delete_cookie(key=context.settings.AUTH_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=AccountOut)
def current_account(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> AccountOut:
    """Return the authenticated account."""
    return AccountOut.model_validate(get_own_account(db, current_user))
