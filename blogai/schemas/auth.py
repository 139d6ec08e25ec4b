"""Request/response schemas for auth, profile and admin account endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["admin", "user"]
Subscription = Literal["free", "premium"]


def _validate_email(value: str) -> str:
    """Light shape check; emails are matched case-sensitively and stored as given."""
    if not value or any(ch.isspace() for ch in value):
        raise ValueError("email must be non-empty and contain no whitespace")
    local, sep, domain = value.partition("@")
    if not sep or not local or not domain:
        raise ValueError("email must look like name@domain")
    return value


class SignupRequest(BaseModel):
    """New account details."""

    name: str | None = Field(default=None, max_length=255, description="Display name")
    email: str = Field(..., min_length=3, max_length=255, description="Email (unique)")
    password: str = Field(..., min_length=8, max_length=128, description="Password")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _validate_email(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class SubjectIdentity(BaseModel):
    """Identity extracted from a verified session token."""

    model_config = ConfigDict(frozen=True)

    id: int
    role: Role = "user"
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class RequestAuth(BaseModel):
    """Bearer token read from the request plus its verified subject (None if invalid)."""

    token: str | None = None
    subject: SubjectIdentity | None = None


class AccountOut(BaseModel):
    """Account as returned to clients (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    avatar: str | None = None
    role: Role
    subscription: Subscription
    generations_left: int
    generations_total: int
    created_at: datetime | None = None


class LoginResponse(BaseModel):
    """Successful login: account summary and the session token (also set as a cookie)."""

    success: bool = True
    user: AccountOut
    access_token: str = Field(..., description="Signed session token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime


class SignupResponse(BaseModel):
    message: str = "User created successfully"
    user: AccountOut


class MessageResponse(BaseModel):
    message: str


class ProfileUpdateRequest(BaseModel):
    """Fields a user may change on their own profile."""

    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    avatar: str | None = Field(default=None, max_length=1024)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return _validate_email(v)


class ProfileUpdateResponse(BaseModel):
    message: str = "Profile updated successfully"
    user: AccountOut


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class AdminAccountUpdate(BaseModel):
    """Admin-scoped role and/or tier change."""

    role: Role | None = None
    subscription: Subscription | None = None


class AdminStatsResponse(BaseModel):
    total_users: int
    premium_users: int
    total_posts: int
    posts_this_month: int


class AccountDeletionResponse(BaseModel):
    """Counts of rows removed by the account deletion cascade."""

    success: bool = True
    deleted_account_id: int
    saved_posts_deleted: int
    collections_deleted: int
    posts_deleted: int
