"""Schemas for the user directory and admin user management."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bugsage.schemas.common import Envelope


class UserListItem(BaseModel):
    """User entry for pickers and the admin table (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    status: str
    created_at: datetime | None = None
    last_login: datetime | None = None


class UsersListResponse(Envelope):
    users: list[UserListItem]


class UserCreatedResponse(Envelope):
    user: UserListItem


class UserCreate(BaseModel):
    """POST /users body (admin creates an account with an explicit role)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=128)
    role: str = "user"


class UserUpdate(BaseModel):
    """PUT /users body; admins change role and/or status."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = 0
    role: str | None = None
    status: str | None = None
