"""ORM model for bug reports."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from bugsage.models.base import Base

BUG_PRIORITIES = ("low", "medium", "high")
# Kanban column order.
BUG_STATUSES = ("open", "in-progress", "testing", "closed")


class Bug(Base):
    """
    A bug reported against a project.

    project_id uses ON DELETE RESTRICT: a project cannot be removed while bugs
    still reference it. reported_by is always the creating user.
    """

    __tablename__ = "bugs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    project_id = Column(
        Integer,
        ForeignKey("projects.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    priority = Column(String(16), nullable=False, default="medium", server_default="medium", index=True)
    status = Column(String(16), nullable=False, default="open", server_default="open", index=True)
    assigned_to = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    reported_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)
