"""ORM model for the server-side session store."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from bugsage.models.base import Base


class AuthSession(Base):
    """
    One login session. The client holds the raw token in a cookie; only its
    SHA-256 digest is stored. Identity fields are copied at login so requests
    can be authorized without re-reading the users table.
    """

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    username = Column(String(50), nullable=False)
    role = Column(String(32), nullable=False)
    email = Column(String(100), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
