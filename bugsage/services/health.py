"""Service health: database reachability, applied migration and live sessions."""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bugsage.models import AuthSession
from bugsage.schemas.health import HealthResponse

if TYPE_CHECKING:
    from bugsage.core.config import Settings

logger = logging.getLogger(__name__)


def _schema_revision(db: Session) -> str | None:
    """Alembic revision stamped on this database; None when migrations never ran."""
    try:
        return db.execute(text("SELECT version_num FROM alembic_version")).scalar()
    except SQLAlchemyError:
        db.rollback()
        return None


def _active_sessions(db: Session) -> int:
    now = datetime.now(timezone.utc)
    return db.query(func.count(AuthSession.id)).filter(AuthSession.expires_at > now).scalar() or 0


def build_health(db: Session, settings: "Settings") -> HealthResponse:
    """
    ok when the database answers; degraded otherwise.

    Revision and session count are only reported while the database is reachable.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Health check: database unreachable", exc_info=True)
        db.rollback()
        return HealthResponse(
            status="degraded",
            environment=settings.APP_ENV,
            database="disconnected",
        )
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected",
        schema_revision=_schema_revision(db),
        active_sessions=_active_sessions(db),
    )
