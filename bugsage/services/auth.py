"""Login, registration, logout and current-user lookup."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.orm import Session

from bugsage.core.errors import NotFound, ValidationError
from bugsage.core.security import verify_password
from bugsage.models import User
from bugsage.schemas.auth import SessionContext
from bugsage.services.sessions import create_session, destroy_session
from bugsage.services.users import create_account, find_by_login, validate_new_account

if TYPE_CHECKING:
    from bugsage.core.config import Settings

logger = logging.getLogger(__name__)

# One message for unknown user and wrong password so accounts cannot be enumerated.
INVALID_CREDENTIALS = "Invalid credentials"


class InvalidCredentials(ValidationError):
    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS)


class AccountInactive(ValidationError):
    def __init__(self) -> None:
        super().__init__("Account is not active")


def login(
    db: Session,
    identifier: str,
    password: str,
    settings: "Settings",
) -> tuple[User, str]:
    """
    Authenticate by username or email and open a session.

    Returns the user and the raw session token. Updates last_login.
    """
    identifier = identifier.strip()
    if not identifier or not password:
        raise ValidationError("Username and password are required")

    user = find_by_login(db, identifier)
    if user is None:
        logger.info("Login failed: username=%s reason=not_found", identifier)
        raise InvalidCredentials()
    if user.status != "active":
        logger.info("Login failed: username=%s reason=inactive", identifier)
        raise AccountInactive()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed: username=%s reason=bad_password", identifier)
        raise InvalidCredentials()

    token = create_session(db, user, settings)
    user.last_login = func.now()
    db.commit()
    db.refresh(user)
    logger.info("Login succeeded: user_id=%s", user.id)
    return user, token


def register(
    db: Session,
    username: str,
    email: str,
    password: str,
    confirm_password: str,
    settings: "Settings",
) -> tuple[User, str]:
    """Create a regular active user and log them in. Returns the user and session token."""
    username = username.strip()
    email = email.strip()
    validate_new_account(username, email, password, settings)
    if password != confirm_password:
        raise ValidationError("Passwords do not match")

    user = create_account(db, username, email, password, role="user")
    token = create_session(db, user, settings)
    db.commit()
    logger.info("User registered: user_id=%s", user.id)
    return user, token


def logout(db: Session, token: str | None, ctx: SessionContext | None = None) -> None:
    """Destroy the session behind token; succeeds even when there is none."""
    destroy_session(db, token)
    if ctx is not None:
        logger.info("Logout: user_id=%s", ctx.user_id)


def current_user(db: Session, ctx: SessionContext) -> User:
    """Re-read the session's user from the database."""
    user = db.get(User, ctx.user_id)
    if user is None:
        raise NotFound("User not found")
    return user
