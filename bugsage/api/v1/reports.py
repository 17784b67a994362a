"""Reports endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bugsage.api.v1.auth import get_current_user
from bugsage.core.database import get_db
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.reports import ReportResponse
from bugsage.services.reports import DEFAULT_RANGE, build_report

router = APIRouter()


@router.get("", response_model=ReportResponse)
def get_report(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[SessionContext, Depends(get_current_user)],
    range_key: Annotated[str, Query(alias="range")] = DEFAULT_RANGE,
) -> ReportResponse:
    """
    Bug activity for bugs reported within range (7d, 30d, 90d, 1y or all):
    summary cards, daily trend, distributions, per-project and per-assignee tables.
    """
    return build_report(db, range_key)
