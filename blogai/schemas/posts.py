"""Pydantic schemas for posts, drafts, saves and the dashboard."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PostStatus = Literal["draft", "published"]
DateFilter = Literal["all", "last-week", "last-month", "last-year"]


class PostCreateRequest(BaseModel):
    """Body for creating a draft or publishing a post directly."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(default="", max_length=200_000)
    writing_phase: str | None = Field(
        default=None,
        max_length=64,
        description="Free-form progress label such as 'Needs Editing' or 'Ready to Publish'.",
    )


class PostUpdateRequest(BaseModel):
    """Owner update; omitted fields are left unchanged. The author cannot be changed."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = Field(default=None, max_length=200_000)
    status: PostStatus | None = None
    writing_phase: str | None = Field(default=None, max_length=64)


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    author_id: int
    title: str
    content: str
    excerpt: str
    status: PostStatus
    writing_phase: str | None = None
    word_count: int
    likes: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PostSummary(BaseModel):
    """Listing entry without the full content."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    excerpt: str
    status: PostStatus
    writing_phase: str | None = None
    word_count: int
    updated_at: datetime | None = None


class PostCollectionsUpdate(BaseModel):
    collection_ids: list[int] = Field(default_factory=list, max_length=500)


class DashboardStats(BaseModel):
    total_posts: int
    published_posts: int
    draft_posts: int
    generations: str = Field(..., description="Remaining/total generations, e.g. '12/20'.")


class DashboardItem(BaseModel):
    id: int
    title: str
    date: str = Field(..., description="Relative date label, e.g. 'Today' or '2 days ago'.")
    status: str | None = None


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_posts: list[DashboardItem]
    drafts: list[DashboardItem]
