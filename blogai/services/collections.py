"""Collection operations, all scoped to the requesting owner."""

import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from blogai.core.errors import NotFound, ValidationError
from blogai.models import Collection, post_collections
from blogai.schemas.auth import SubjectIdentity
from blogai.services.authorization import Action, authorize

logger = logging.getLogger(__name__)


def list_collections(
    db: Session,
    requester: SubjectIdentity,
    query: str = "",
) -> list[tuple[Collection, int]]:
    """Own collections matching query (name or description), each with its post count."""
    post_count = (
        db.query(func.count(post_collections.c.post_id))
        .filter(post_collections.c.collection_id == Collection.id)
        .correlate(Collection)
        .scalar_subquery()
    )
    q = db.query(Collection, post_count).filter(Collection.owner_id == requester.id)
    if query:
        q = q.filter(
            or_(
                Collection.name.icontains(query, autoescape=True),
                Collection.description.icontains(query, autoescape=True),
            )
        )
    rows = q.order_by(Collection.created_at.desc(), Collection.id.desc()).all()
    return [(collection, int(count or 0)) for collection, count in rows]


def create_collection(
    db: Session,
    requester: SubjectIdentity,
    *,
    name: str,
    description: str | None = None,
) -> Collection:
    if not name or not name.strip():
        raise ValidationError("Name is required")
    collection = Collection(
        owner_id=requester.id,
        name=name.strip(),
        description=description,
    )
    db.add(collection)
    db.commit()
    db.refresh(collection)
    return collection


def delete_collection(db: Session, requester: SubjectIdentity, collection_id: int) -> None:
    collection = db.get(Collection, collection_id)
    if collection is None:
        raise NotFound("Collection not found")
    authorize(requester, Action.OWNER_MUTATE, owner_id=collection.owner_id)
    collection.posts = []
    db.delete(collection)
    db.commit()
    logger.info(
        "Collection deleted",
        extra={"collection_id": collection_id, "user_id": requester.id},
    )
