"""User directory and admin user management. Users are deactivated, never deleted."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bugsage.api.v1.auth import get_current_user, require_admin
from bugsage.core.config import Settings, get_settings
from bugsage.core.database import get_db
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.common import Envelope
from bugsage.schemas.users import (
    UserCreate,
    UserCreatedResponse,
    UserListItem,
    UsersListResponse,
    UserUpdate,
)
from bugsage.services import users as user_service

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[SessionContext, Depends(get_current_user)],
) -> UsersListResponse:
    """Admins see every account; other users see active accounts (assignee picker)."""
    return UsersListResponse(users=user_service.list_users(db, current_user))


@router.post("", response_model=UserCreatedResponse)
def create_user(
    body: UserCreate,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    admin: Annotated[SessionContext, Depends(require_admin)],
) -> UserCreatedResponse:
    user = user_service.admin_create_user(db, body, settings, admin)
    return UserCreatedResponse(message="User created successfully", user=UserListItem.model_validate(user))


@router.put("", response_model=Envelope)
def update_user(
    body: UserUpdate,
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[SessionContext, Depends(require_admin)],
) -> Envelope:
    user_service.admin_update_user(db, body, admin)
    return Envelope(message="User updated successfully")
