"""Admin endpoints: list accounts, stats, role/tier changes and account deletion."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogai.api.v1.auth import require_admin
from blogai.core.context import AppContext, get_context, get_db
from blogai.schemas.auth import (
    AccountDeletionResponse,
    AccountOut,
    AdminAccountUpdate,
    AdminStatsResponse,
    SubjectIdentity,
)
from blogai.services.accounts import (
    account_stats,
    admin_update_account,
    delete_account,
    list_accounts,
)

router = APIRouter()


@router.get("/users", response_model=list[AccountOut])
def get_users(
    admin: Annotated[SubjectIdentity, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> list[AccountOut]:
    """List all accounts, newest first (admin only)."""
    return [AccountOut.model_validate(u) for u in list_accounts(db, admin)]


@router.get("/stats", response_model=AdminStatsResponse)
def get_stats(
    admin: Annotated[SubjectIdentity, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminStatsResponse:
    return AdminStatsResponse(**account_stats(db, admin))


@router.patch("/users/{user_id}", response_model=AccountOut)
def patch_user(
    user_id: int,
    body: AdminAccountUpdate,
    admin: Annotated[SubjectIdentity, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> AccountOut:
    """
    Change an account's role and/or subscription. Upgrading to premium resets the
    quota to the premium allotment. Admins cannot demote themselves.
    """
    user = admin_update_account(
        db,
        admin,
        user_id,
        role=body.role,
        subscription=body.subscription,
        premium_generations=context.settings.PREMIUM_GENERATIONS,
    )
    return AccountOut.model_validate(user)


@router.delete("/users/{user_id}", response_model=AccountDeletionResponse)
def delete_user(
    user_id: int,
    admin: Annotated[SubjectIdentity, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> AccountDeletionResponse:
    """Delete an account with its posts, collections and saves, atomically. Admins cannot delete themselves."""
    summary = delete_account(db, admin, user_id)
    return AccountDeletionResponse(
        deleted_account_id=summary.account_id,
        saved_posts_deleted=summary.saved_posts_deleted,
        collections_deleted=summary.collections_deleted,
        posts_deleted=summary.posts_deleted,
    )
