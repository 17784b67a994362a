"""Dashboard endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bugsage.api.v1.auth import get_current_user
from bugsage.core.database import get_db
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.dashboard import DashboardResponse
from bugsage.services.dashboard import build_dashboard

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[SessionContext, Depends(get_current_user)],
) -> DashboardResponse:
    """Headline counts, the 10 newest bugs, the caller's assigned bugs and chart data."""
    return build_dashboard(db, current_user)
