"""Pydantic request/response schemas."""

from blogai.schemas.auth import (
    AccountOut,
    LoginRequest,
    RequestAuth,
    SignupRequest,
    SubjectIdentity,
)
from blogai.schemas.collections import CollectionCreateRequest, CollectionOut
from blogai.schemas.health import HealthResponse
from blogai.schemas.posts import PostCreateRequest, PostOut, PostUpdateRequest

__all__ = [
    "AccountOut",
    "CollectionCreateRequest",
    "CollectionOut",
    "HealthResponse",
    "LoginRequest",
    "PostCreateRequest",
    "PostOut",
    "PostUpdateRequest",
    "RequestAuth",
    "SignupRequest",
    "SubjectIdentity",
]
