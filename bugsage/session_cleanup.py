"""
CLI entrypoint for expired-session cleanup. Run from cron, e.g.:

  python -m bugsage.session_cleanup

Or hourly: 0 * * * * cd /path/to/bugsage && .venv/bin/python -m bugsage.session_cleanup
"""

import logging
import sys

from bugsage.core.config import get_settings
from bugsage.core.database import SessionLocal
from bugsage.services.session_cleanup import run_session_cleanup

logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete sessions whose expiry has passed."""
    db = SessionLocal()
    try:
        deleted = run_session_cleanup(db)
        logger.info("Session cleanup completed: sessions_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Session cleanup failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
