"""Health endpoint for load balancers and deploy checks; no session required."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bugsage.core.config import Settings, get_settings
from bugsage.core.database import get_db
from bugsage.schemas.health import HealthResponse
from bugsage.services.health import build_health

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Database reachability, migration revision and the number of live sessions."""
    return build_health(db, settings)
