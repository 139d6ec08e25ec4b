"""Post endpoints: drafts, publishing, search, edits, collection membership and saves."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.orm import Session

from blogai.api.v1.auth import get_current_user
from blogai.core.context import AppContext, get_context, get_db
from blogai.schemas.auth import SubjectIdentity
from blogai.schemas.collections import CollectionOut
from blogai.schemas.posts import (
    DateFilter,
    PostCollectionsUpdate,
    PostCreateRequest,
    PostOut,
    PostStatus,
    PostSummary,
    PostUpdateRequest,
)
from blogai.services import posts as post_service
from blogai.services.accounts import get_own_account

router = APIRouter()


@router.get("", response_model=list[PostSummary])
def list_posts(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    query: Annotated[str, Query(max_length=500)] = "",
    status_filter: Annotated[PostStatus | None, Query(alias="status")] = None,
    date_filter: DateFilter = "all",
) -> list[PostSummary]:
    """Search own posts by text (title, content, excerpt), status and age."""
    posts = post_service.list_posts(
        db,
        current_user,
        query=query,
        status=status_filter,
        date_filter=date_filter,
    )
    return [PostSummary.model_validate(p) for p in posts]


@router.get("/drafts", response_model=list[PostSummary])
def list_drafts(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    query: Annotated[str, Query(max_length=500)] = "",
    writing_phase: Annotated[str, Query(max_length=64)] = "all",
) -> list[PostSummary]:
    drafts = post_service.list_drafts(db, current_user, query=query, writing_phase=writing_phase)
    return [PostSummary.model_validate(d) for d in drafts]


@router.get("/saved", response_model=list[PostSummary])
def list_saved(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[PostSummary]:
    return [PostSummary.model_validate(p) for p in post_service.list_saved_posts(db, current_user)]


@router.post("/draft", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_draft(
    body: PostCreateRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> PostOut:
    post = post_service.create_post(
        db,
        current_user,
        title=body.title,
        content=body.content,
        status="draft",
        writing_phase=body.writing_phase,
    )
    return PostOut.model_validate(post)


@router.post("/publish", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def publish(
    body: PostCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> PostOut:
    """Create a published post and email the author a publication notice (best effort)."""
    post = post_service.create_post(
        db,
        current_user,
        title=body.title,
        content=body.content,
        status="published",
        writing_phase=body.writing_phase,
    )
    author = get_own_account(db, current_user)
    background_tasks.add_task(context.mailer.send_publication_notice, author, post)
    return PostOut.model_validate(post)


@router.get("/{post_id}", response_model=PostOut)
def get_post(
    post_id: int,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> PostOut:
    return PostOut.model_validate(post_service.get_readable_post(db, current_user, post_id))


@router.put("/{post_id}", response_model=PostOut)
def update_post(
    post_id: int,
    body: PostUpdateRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> PostOut:
    """Owner-only update; excerpt and word count are recomputed when content changes."""
    post = post_service.update_post(
        db,
        current_user,
        post_id,
        title=body.title,
        content=body.content,
        status=body.status,
        writing_phase=body.writing_phase,
    )
    return PostOut.model_validate(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: int,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    post_service.delete_post(db, current_user, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{post_id}/collections", response_model=list[CollectionOut])
def get_post_collections(
    post_id: int,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[CollectionOut]:
    collections = post_service.get_post_collections(db, current_user, post_id)
    return [CollectionOut.model_validate(c) for c in collections]


@router.put("/{post_id}/collections", response_model=list[CollectionOut])
def put_post_collections(
    post_id: int,
    body: PostCollectionsUpdate,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[CollectionOut]:
    """Replace which of the caller's collections contain this post."""
    collections = post_service.set_post_collections(db, current_user, post_id, body.collection_ids)
    return [CollectionOut.model_validate(c) for c in collections]


@router.post("/{post_id}/save", status_code=status.HTTP_201_CREATED)
def save_post(
    post_id: int,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, int]:
    saved = post_service.save_post(db, current_user, post_id)
    return {"post_id": saved.post_id}


@router.delete("/{post_id}/save", status_code=status.HTTP_204_NO_CONTENT)
def unsave_post(
    post_id: int,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    post_service.unsave_post(db, current_user, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
