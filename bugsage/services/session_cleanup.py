"""Session cleanup: delete server-side sessions whose expiry has passed."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from bugsage.models import AuthSession

logger = logging.getLogger(__name__)


def run_session_cleanup(session: Session) -> int:
    """
    Delete expired sessions and return how many were removed.

    Idempotent: safe to run repeatedly from cron.
    """
    now = datetime.now(timezone.utc)
    deleted_count = (
        session.query(AuthSession)
        .filter(AuthSession.expires_at <= now)
        .delete(synchronize_session=False)
    )
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Session cleanup: now=%s, sessions_deleted=%s",
            now.isoformat(),
            deleted_count,
        )
    return deleted_count
