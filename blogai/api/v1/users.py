"""Own profile and password endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogai.api.v1.auth import get_current_user
from blogai.core.context import AppContext, get_context, get_db
from blogai.schemas.auth import (
    AccountOut,
    MessageResponse,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    SubjectIdentity,
)
from blogai.services.accounts import change_password, get_own_account, update_profile

router = APIRouter()


@router.get("/profile", response_model=AccountOut)
def get_profile(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> AccountOut:
    return AccountOut.model_validate(get_own_account(db, current_user))


@router.put("/profile", response_model=ProfileUpdateResponse)
def put_profile(
    body: ProfileUpdateRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProfileUpdateResponse:
    """Update name, email or avatar. Returns 409 if the email belongs to another account."""
    user = update_profile(
        db,
        current_user,
        name=body.name,
        email=body.email,
        avatar=body.avatar,
    )
    return ProfileUpdateResponse(user=AccountOut.model_validate(user))


@router.put("/password", response_model=MessageResponse)
def put_password(
    body: PasswordChangeRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> MessageResponse:
    change_password(
        db,
        current_user,
        context.issuer,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return MessageResponse(message="Password updated successfully")
