"""Post operations: drafts, publishing, search, ownership-checked edits and saves."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from blogai.core.errors import NotFound, ValidationError
from blogai.models import Collection, Post, SavedPost
from blogai.schemas.auth import SubjectIdentity
from blogai.services.authorization import Action, authorize

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 150

# date_filter value -> how far back created_at may go
DATE_FILTER_WINDOWS = {
    "last-week": timedelta(days=7),
    "last-month": timedelta(days=30),
    "last-year": timedelta(days=365),
}


def count_words(content: str | None) -> int:
    if not content:
        return 0
    return len(content.split())


def make_excerpt(content: str | None, length: int = EXCERPT_LENGTH) -> str:
    """First `length` characters of content, with '...' appended when truncated."""
    if not content:
        return ""
    if len(content) <= length:
        return content
    return content[:length] + "..."


def _apply_content(post: Post, content: str) -> None:
    post.content = content
    post.excerpt = make_excerpt(content)
    post.word_count = count_words(content)


def _contains(column, query: str):
    # Plain substring match; % and _ in the query are escaped, not wildcards.
    return column.icontains(query, autoescape=True)


def create_post(
    db: Session,
    requester: SubjectIdentity,
    *,
    title: str,
    content: str,
    status: str = "draft",
    writing_phase: str | None = None,
) -> Post:
    if not title or not title.strip():
        raise ValidationError("Title is required")
    if status not in ("draft", "published"):
        raise ValidationError("Invalid status")
    post = Post(
        author_id=requester.id,
        title=title.strip(),
        status=status,
        writing_phase=writing_phase,
        likes=0,
    )
    _apply_content(post, content or "")
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info(
        "Post created",
        extra={"post_id": post.id, "user_id": requester.id, "status": status},
    )
    return post


def get_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


def get_readable_post(db: Session, requester: SubjectIdentity, post_id: int) -> Post:
    """Published posts are readable by any authenticated user; drafts only by their author."""
    post = get_post(db, post_id)
    if post.status != "published":
        authorize(requester, Action.OWNER_READ, owner_id=post.author_id)
    return post


def update_post(
    db: Session,
    requester: SubjectIdentity,
    post_id: int,
    *,
    title: str | None = None,
    content: str | None = None,
    status: str | None = None,
    writing_phase: str | None = None,
) -> Post:
    post = get_post(db, post_id)
    authorize(requester, Action.OWNER_MUTATE, owner_id=post.author_id)
    if title is not None:
        if not title.strip():
            raise ValidationError("Title is required")
        post.title = title.strip()
    if content is not None:
        _apply_content(post, content)
    if status is not None:
        post.status = status
    if writing_phase is not None:
        post.writing_phase = writing_phase
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, requester: SubjectIdentity, post_id: int) -> None:
    """Owner-only delete; also removes saves of and collection links to the post."""
    post = get_post(db, post_id)
    authorize(requester, Action.OWNER_MUTATE, owner_id=post.author_id)
    db.query(SavedPost).filter(SavedPost.post_id == post.id).delete(synchronize_session=False)
    post.collections = []
    db.delete(post)
    db.commit()
    logger.info("Post deleted", extra={"post_id": post_id, "user_id": requester.id})


def list_posts(
    db: Session,
    requester: SubjectIdentity,
    *,
    query: str = "",
    status: str | None = None,
    date_filter: str = "all",
    now: datetime | None = None,
) -> list[Post]:
    """Own posts filtered by text, status and age, most recently updated first."""
    q = db.query(Post).filter(Post.author_id == requester.id)
    if query:
        q = q.filter(
            or_(
                _contains(Post.title, query),
                _contains(Post.content, query),
                _contains(Post.excerpt, query),
            )
        )
    if status:
        q = q.filter(Post.status == status)
    window = DATE_FILTER_WINDOWS.get(date_filter)
    if window is not None:
        cutoff = (now or datetime.now(UTC)) - window
        q = q.filter(Post.created_at >= cutoff)
    return q.order_by(Post.updated_at.desc(), Post.id.desc()).all()


def list_drafts(
    db: Session,
    requester: SubjectIdentity,
    *,
    query: str = "",
    writing_phase: str = "all",
) -> list[Post]:
    q = db.query(Post).filter(Post.author_id == requester.id, Post.status == "draft")
    if writing_phase and writing_phase != "all":
        q = q.filter(Post.writing_phase == writing_phase)
    if query:
        q = q.filter(
            or_(
                _contains(Post.title, query),
                _contains(Post.content, query),
                _contains(Post.excerpt, query),
            )
        )
    return q.order_by(Post.updated_at.desc(), Post.id.desc()).all()


def get_post_collections(db: Session, requester: SubjectIdentity, post_id: int) -> list[Collection]:
    """The requester's collections that contain the post."""
    post = get_readable_post(db, requester, post_id)
    return [c for c in post.collections if c.owner_id == requester.id]


def set_post_collections(
    db: Session,
    requester: SubjectIdentity,
    post_id: int,
    collection_ids: list[int],
) -> list[Collection]:
    """
    Replace the post's membership among the requester's collections.

    Every referenced collection must exist and belong to the requester. Other
    users' collections that contain the post are left untouched.
    """
    post = get_readable_post(db, requester, post_id)
    wanted = set(collection_ids)
    collections = (
        db.query(Collection).filter(Collection.id.in_(wanted)).all() if wanted else []
    )
    found = {c.id for c in collections}
    missing = wanted - found
    if missing:
        raise NotFound(f"Collection not found: {min(missing)}")
    for collection in collections:
        authorize(requester, Action.OWNER_MUTATE, owner_id=collection.owner_id)

    kept = [c for c in post.collections if c.owner_id != requester.id]
    post.collections = kept + sorted(collections, key=lambda c: c.id)
    db.commit()
    db.refresh(post)
    return [c for c in post.collections if c.owner_id == requester.id]


def save_post(db: Session, requester: SubjectIdentity, post_id: int) -> SavedPost:
    """Bookmark a post; idempotent. Drafts can only be saved by their author."""
    post = get_readable_post(db, requester, post_id)
    existing = (
        db.query(SavedPost)
        .filter(SavedPost.user_id == requester.id, SavedPost.post_id == post.id)
        .first()
    )
    if existing is not None:
        return existing
    saved = SavedPost(user_id=requester.id, post_id=post.id)
    db.add(saved)
    db.commit()
    db.refresh(saved)
    return saved


def unsave_post(db: Session, requester: SubjectIdentity, post_id: int) -> None:
    deleted = (
        db.query(SavedPost)
        .filter(SavedPost.user_id == requester.id, SavedPost.post_id == post_id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        raise NotFound("Saved post not found")
    db.commit()


def list_saved_posts(db: Session, requester: SubjectIdentity) -> list[Post]:
    return (
        db.query(Post)
        .join(SavedPost, SavedPost.post_id == Post.id)
        .filter(SavedPost.user_id == requester.id)
        .order_by(SavedPost.created_at.desc(), SavedPost.id.desc())
        .all()
    )
