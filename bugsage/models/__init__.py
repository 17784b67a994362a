"""SQLAlchemy ORM models."""

from bugsage.models.base import Base
from bugsage.models.bug import Bug
from bugsage.models.project import Project
from bugsage.models.session import AuthSession
from bugsage.models.user import User

__all__ = ["AuthSession", "Base", "Bug", "Project", "User"]
