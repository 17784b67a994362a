"""User accounts: validation and creation shared by registration and admin tools."""

import logging

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bugsage.core.config import Settings
from bugsage.core.errors import Conflict, NotFound, ValidationError
from bugsage.core.security import EMAIL_MAX_LEN, USERNAME_MAX_LEN, hash_password
from bugsage.models import User
from bugsage.models.user import USER_ROLES, USER_STATUSES
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.users import UserCreate, UserListItem, UserUpdate
from bugsage.services.sessions import destroy_user_sessions

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(email: str) -> bool:
    """Syntax-only check; no DNS lookups."""
    try:
        _email_adapter.validate_python(email)
    except PydanticValidationError:
        return False
    return True


def validate_new_account(
    username: str,
    email: str,
    password: str,
    settings: Settings,
) -> None:
    """Raise ValidationError for the first problem found in new account fields."""
    if not username or not email or not password:
        raise ValidationError("All fields are required")
    if len(username) > USERNAME_MAX_LEN:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LEN} characters")
    if len(email) > EMAIL_MAX_LEN or not is_valid_email(email):
        raise ValidationError("Invalid email format")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )


def find_by_login(db: Session, identifier: str) -> User | None:
    """Look a user up by username or email."""
    return (
        db.query(User)
        .filter(or_(User.username == identifier, User.email == identifier))
        .first()
    )


def create_account(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str = "user",
) -> User:
    """
    Insert an active user after the uniqueness check.

    The pre-check gives a clean message; the unique indexes still reject a
    concurrent duplicate, which is reported the same way. Commits.
    """
    existing = (
        db.query(User.id)
        .filter(or_(User.username == username, User.email == email))
        .first()
    )
    if existing is not None:
        raise Conflict("Username or email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
        status="active",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("Username or email already exists") from e
    db.refresh(user)
    return user


def list_users(db: Session, ctx: SessionContext) -> list[UserListItem]:
    """All users for admins; active users only for everyone else (assignee pickers)."""
    query = db.query(User)
    if not ctx.is_admin:
        query = query.filter(User.status == "active")
    users = query.order_by(func.lower(User.username)).all()
    return [UserListItem.model_validate(u) for u in users]


def admin_create_user(db: Session, body: UserCreate, settings: Settings, ctx: SessionContext) -> User:
    """Admin-created account with an explicit role; no session is opened."""
    validate_new_account(body.username, body.email, body.password, settings)
    if body.role not in USER_ROLES:
        raise ValidationError("Invalid role")
    user = create_account(db, body.username, body.email, body.password, role=body.role)
    logger.info("User created by admin: user_id=%s role=%s by=%s", user.id, user.role, ctx.user_id)
    return user


def admin_update_user(db: Session, body: UserUpdate, ctx: SessionContext) -> None:
    """
    Change role and/or status of another user.

    Existing sessions of that user are dropped so the new role applies at once.
    """
    if not body.id:
        raise ValidationError("User ID is required")
    values: dict[str, str] = {}
    if body.role:
        if body.role not in USER_ROLES:
            raise ValidationError("Invalid role")
        values["role"] = body.role
    if body.status:
        if body.status not in USER_STATUSES:
            raise ValidationError("Invalid status")
        values["status"] = body.status
    if not values:
        raise ValidationError("No fields to update")
    if body.id == ctx.user_id:
        raise ValidationError("You cannot change your own role or status")

    user = db.get(User, body.id)
    if user is None:
        raise NotFound("User not found")
    for key, value in values.items():
        setattr(user, key, value)
    user.updated_at = func.now()
    destroy_user_sessions(db, user.id)
    db.commit()
    logger.info("User updated: user_id=%s fields=%s by=%s", user.id, sorted(values), ctx.user_id)
