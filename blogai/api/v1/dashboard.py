"""Dashboard endpoint: the caller's post totals, quota and recent activity."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogai.api.v1.auth import get_current_user
from blogai.core.context import get_db
from blogai.schemas.auth import SubjectIdentity
from blogai.schemas.posts import DashboardResponse
from blogai.services.dashboard import build_dashboard

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    current_user: Annotated[SubjectIdentity, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DashboardResponse:
    return build_dashboard(db, current_user)
