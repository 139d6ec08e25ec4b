"""Collection endpoints (owner-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from blogai.api.v1.auth import get_current_user
from blogai.core.context import get_db
from blogai.schemas.auth import SubjectIdentity
from blogai.schemas.collections import CollectionCreateRequest, CollectionOut
from blogai.services import collections as collection_service

router = APIRouter()


@router.get("", response_model=list[CollectionOut])
def list_collections(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    query: Annotated[str, Query(max_length=255)] = "",
) -> list[CollectionOut]:
    """Own collections whose name or description contains query, with post counts."""
    rows = collection_service.list_collections(db, current_user, query)
    return [
        CollectionOut.model_validate(collection).model_copy(update={"post_count": count})
        for collection, count in rows
    ]


@router.post("", response_model=CollectionOut, status_code=status.HTTP_201_CREATED)
def create_collection(
    body: CollectionCreateRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CollectionOut:
    collection = collection_service.create_collection(
        db,
        current_user,
        name=body.name,
        description=body.description,
    )
    return CollectionOut.model_validate(collection)


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_collection(
    collection_id: int,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    collection_service.delete_collection(db, current_user, collection_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
