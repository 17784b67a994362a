"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Column, DateTime, Integer, String, func

from bugsage.models.base import Base

USER_ROLES = ("admin", "user")
USER_STATUSES = ("active", "inactive")


class User(Base):
    """
    User account for session authentication and role-based access control.

    role: 'admin' or 'user'. status: only 'active' accounts may log in.
    Users are never hard-deleted; admins deactivate them instead.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user", server_default="user")
    status = Column(String(32), nullable=False, default="active", server_default="active")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
