"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field

Integration = Literal["configured", "unconfigured"]


class HealthResponse(BaseModel):
    """Service status, store connectivity and which outbound integrations are set up."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
    text_generation: Integration = Field(
        default="unconfigured",
        description="Whether GEMINI_API_KEY is set; generation endpoints return 502 otherwise",
    )
    email: Integration = Field(
        default="unconfigured",
        description="Whether RESEND_API_KEY is set; outbound email is skipped otherwise",
    )
