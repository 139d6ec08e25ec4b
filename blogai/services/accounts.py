"""Account operations: profile, password, admin management and quota."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from blogai.core.errors import Conflict, NotFound, QuotaExhausted, ValidationError
from blogai.core.security import verify_password
from blogai.models import Collection, Post, SavedPost, User, post_collections
from blogai.schemas.auth import SubjectIdentity
from blogai.services.authorization import (
    Action,
    authorize,
    check_account_deletion,
    check_role_change,
)
from blogai.services.credentials import CredentialIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionSummary:
    account_id: int
    saved_posts_deleted: int
    collections_deleted: int
    posts_deleted: int


def get_account(db: Session, account_id: int) -> User:
    user = db.get(User, account_id)
    if user is None:
        raise NotFound("User not found")
    return user


def get_own_account(db: Session, requester: SubjectIdentity) -> User:
    authorize(requester, Action.READ_OWN)
    return get_account(db, requester.id)


def update_profile(
    db: Session,
    requester: SubjectIdentity,
    *,
    name: str | None = None,
    email: str | None = None,
    avatar: str | None = None,
) -> User:
    """Update own name/email/avatar. An email held by another account is a Conflict."""
    authorize(requester, Action.UPDATE_OWN)
    user = get_account(db, requester.id)
    if email is not None and email != user.email:
        taken = (
            db.query(User)
            .filter(User.email == email, User.id != user.id)
            .first()
        )
        if taken is not None:
            raise Conflict("Email already in use")
        user.email = email
    if name is not None:
        user.name = name
    if avatar is not None:
        user.avatar = avatar
    db.commit()
    db.refresh(user)
    return user


def change_password(
    db: Session,
    requester: SubjectIdentity,
    issuer: CredentialIssuer,
    *,
    current_password: str,
    new_password: str,
) -> None:
    """Replace own password after verifying the current one."""
    authorize(requester, Action.UPDATE_OWN)
    user = get_account(db, requester.id)
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    user.password_hash = issuer.hash_secret(new_password)
    db.commit()
    logger.info("Password changed", extra={"user_id": user.id})


def list_accounts(db: Session, requester: SubjectIdentity) -> list[User]:
    authorize(requester, Action.ADMIN_LIST_ACCOUNTS)
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def account_stats(
    db: Session,
    requester: SubjectIdentity,
    now: datetime | None = None,
) -> dict[str, int]:
    """Totals for the admin dashboard; 'this month' starts at 00:00 UTC on day 1."""
    authorize(requester, Action.ADMIN_READ_STATS)
    now = now or datetime.now(UTC)
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return {
        "total_users": db.query(User).count(),
        "premium_users": db.query(User).filter(User.subscription == "premium").count(),
        "total_posts": db.query(Post).count(),
        "posts_this_month": db.query(Post).filter(Post.created_at >= start_of_month).count(),
    }


def admin_update_account(
    db: Session,
    requester: SubjectIdentity,
    target_id: int,
    *,
    role: str | None = None,
    subscription: str | None = None,
    premium_generations: int = 100,
) -> User:
    """
    Change another account's role and/or tier.

    Moving to premium resets the quota to remaining = total = premium_generations.
    """
    check_role_change(requester, target_id, role)
    user = get_account(db, target_id)
    if role is not None:
        user.role = role
    if subscription is not None:
        user.subscription = subscription
        if subscription == "premium":
            user.generations_left = premium_generations
            user.generations_total = premium_generations
    db.commit()
    db.refresh(user)
    logger.info(
        "Account updated by admin",
        extra={
            "admin_id": requester.id,
            "user_id": user.id,
            "role": user.role,
            "subscription": user.subscription,
        },
    )
    return user


def delete_account(db: Session, requester: SubjectIdentity, target_id: int) -> DeletionSummary:
    """
    Delete an account and everything it owns in one transaction.

    Order: saves by the account, saves of the account's posts, collection links,
    collections, posts, then the account. Any failure rolls the whole cascade back.
    """
    check_account_deletion(requester, target_id)
    get_account(db, target_id)

    post_ids = select(Post.id).where(Post.author_id == target_id)
    collection_ids = select(Collection.id).where(Collection.owner_id == target_id)
    try:
        saves_by_account = (
            db.query(SavedPost)
            .filter(SavedPost.user_id == target_id)
            .delete(synchronize_session=False)
        )
        saves_of_posts = (
            db.query(SavedPost)
            .filter(SavedPost.post_id.in_(post_ids))
            .delete(synchronize_session=False)
        )
        db.execute(
            delete(post_collections).where(
                or_(
                    post_collections.c.collection_id.in_(collection_ids),
                    post_collections.c.post_id.in_(post_ids),
                )
            )
        )
        collections_deleted = (
            db.query(Collection)
            .filter(Collection.owner_id == target_id)
            .delete(synchronize_session=False)
        )
        posts_deleted = (
            db.query(Post)
            .filter(Post.author_id == target_id)
            .delete(synchronize_session=False)
        )
        db.query(User).filter(User.id == target_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Account deletion rolled back", extra={"user_id": target_id})
        raise
    db.expire_all()

    summary = DeletionSummary(
        account_id=target_id,
        saved_posts_deleted=saves_by_account + saves_of_posts,
        collections_deleted=collections_deleted,
        posts_deleted=posts_deleted,
    )
    logger.info(
        "Account deleted",
        extra={
            "admin_id": requester.id,
            "user_id": target_id,
            "saved_posts_deleted": summary.saved_posts_deleted,
            "collections_deleted": collections_deleted,
            "posts_deleted": posts_deleted,
        },
    )
    return summary


def ensure_generation_available(db: Session, requester: SubjectIdentity) -> User:
    """Raise QuotaExhausted if the requester has no generations left."""
    user = get_account(db, requester.id)
    if user.generations_left <= 0:
        raise QuotaExhausted()
    return user


def consume_generation(db: Session, requester: SubjectIdentity) -> int:
    """
    Decrement the requester's remaining generations by one; returns what is left.

    The conditional UPDATE keeps remaining >= 0 under concurrent requests.
    """
    updated = (
        db.query(User)
        .filter(User.id == requester.id, User.generations_left > 0)
        .update(
            {User.generations_left: User.generations_left - 1},
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        raise QuotaExhausted()
    db.commit()
    db.expire_all()
    return get_account(db, requester.id).generations_left


def bootstrap_admin_if_needed(
    db: Session,
    issuer: CredentialIssuer,
    email: str | None,
    password: str | None,
) -> User | None:
    """Create the first admin when the users table is empty and credentials are configured."""
    if not email or not password:
        return None
    if db.query(User).count() > 0:
        return None
    user = issuer.register(db, email=email, secret=password, name="Admin", role="admin")
    logger.info("Bootstrap admin created", extra={"user_id": user.id})
    return user
