"""Server-side session store: opaque cookie token -> authenticated identity."""

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from bugsage.core.security import generate_session_token, hash_session_token
from bugsage.models import AuthSession, User
from bugsage.schemas.auth import SessionContext

if TYPE_CHECKING:
    from bugsage.core.config import Settings

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def create_session(db: Session, user: User, settings: "Settings") -> str:
    """
    Persist a new session for user and return the raw token for the cookie.

    The caller commits; the token itself is never stored.
    """
    token = generate_session_token()
    db.add(
        AuthSession(
            token_hash=hash_session_token(token),
            user_id=user.id,
            username=user.username,
            role=user.role,
            email=user.email,
            expires_at=_now() + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES),
        )
    )
    return token


def resolve_session(db: Session, token: str | None) -> SessionContext | None:
    """Return the identity bound to token, or None if unknown or expired."""
    if not token:
        return None
    row = (
        db.query(AuthSession)
        .filter(AuthSession.token_hash == hash_session_token(token))
        .first()
    )
    if row is None:
        return None
    if _as_utc(row.expires_at) <= _now():
        return None
    return SessionContext(
        user_id=row.user_id,
        username=row.username,
        role=row.role,
        email=row.email,
        token=token,
    )


def destroy_session(db: Session, token: str | None) -> None:
    """Delete the session for token. Unknown or missing tokens are fine."""
    if not token:
        return
    db.query(AuthSession).filter(
        AuthSession.token_hash == hash_session_token(token)
    ).delete(synchronize_session=False)
    db.commit()


def destroy_user_sessions(db: Session, user_id: int) -> int:
    """Drop every session of one user (role or status changed). Does not commit."""
    return (
        db.query(AuthSession)
        .filter(AuthSession.user_id == user_id)
        .delete(synchronize_session=False)
    )
