"""Health check endpoint with optional database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogai.core.context import AppContext, get_context, get_db
from blogai.core.database import check_db_connected
from blogai.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    context: Annotated[AppContext, Depends(get_context)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=context.settings.APP_ENV,
        database=db_status,
        text_generation="configured" if context.generator.configured else "unconfigured",
        email="configured" if context.mailer.enabled else "unconfigured",
    )
