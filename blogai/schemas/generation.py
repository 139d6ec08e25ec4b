"""Pydantic schemas for the text-generation endpoints."""

from pydantic import BaseModel, Field


class TopicsRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=500)
    keywords: str | None = Field(default=None, max_length=1000)


class TopicsResponse(BaseModel):
    success: bool = True
    topics: list[str]
    partial_success: bool = False
    message: str | None = None
    generations_left: int


class DraftRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)


class DraftResponse(BaseModel):
    generated_content: str
    generations_left: int


class ImproveRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=200_000)


class ImproveResponse(BaseModel):
    improved_content: str
    generations_left: int
