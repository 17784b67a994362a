"""Core app configuration, database and errors."""

from bugsage.core.config import get_settings, settings
from bugsage.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
