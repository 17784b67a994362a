"""ORM model for projects; a project owns its bugs."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from bugsage.models.base import Base

PROJECT_STATUSES = ("active", "inactive", "archived")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="", server_default="")
    status = Column(String(32), nullable=False, default="active", server_default="active", index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)
