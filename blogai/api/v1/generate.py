"""Generation endpoints: blog ideas, first drafts and rewrites via the text-generation service.

Each successful call consumes one generation from the caller's quota. Upstream
failures return 502 with requires_retry and do not consume quota.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogai.api.v1.auth import get_current_user
from blogai.core.context import AppContext, get_context, get_db
from blogai.schemas.auth import SubjectIdentity
from blogai.schemas.generation import (
    DraftRequest,
    DraftResponse,
    ImproveRequest,
    ImproveResponse,
    TopicsRequest,
    TopicsResponse,
)
from blogai.services.accounts import consume_generation, ensure_generation_available
from blogai.services.generation import (
    TOPIC_COUNT,
    generate_draft,
    generate_topics,
    improve_content,
)

router = APIRouter()


@router.post("/topics", response_model=TopicsResponse)
async def post_topics(
    body: TopicsRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> TopicsResponse:
    """Generate up to five blog post ideas for a topic, optionally steered by keywords."""
    ensure_generation_available(db, current_user)
    result = await generate_topics(context.generator, body.topic, body.keywords)
    left = consume_generation(db, current_user)
    message = None
    if result.partial:
        message = (
            f"Only generated {len(result.topics)} topics. "
            f"You may want to retry for a full set of {TOPIC_COUNT}."
        )
    return TopicsResponse(
        topics=result.topics,
        partial_success=result.partial,
        message=message,
        generations_left=left,
    )


@router.post("/draft", response_model=DraftResponse)
async def post_draft(
    body: DraftRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> DraftResponse:
    ensure_generation_available(db, current_user)
    content = await generate_draft(context.generator, body.title)
    left = consume_generation(db, current_user)
    return DraftResponse(generated_content=content, generations_left=left)


@router.post("/improve", response_model=ImproveResponse)
async def post_improve(
    body: ImproveRequest,
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> ImproveResponse:
    ensure_generation_available(db, current_user)
    content = await improve_content(context.generator, body.content)
    left = consume_generation(db, current_user)
    return ImproveResponse(improved_content=content, generations_left=left)
