"""Request/response schemas for auth endpoints and the request-scoped identity."""

from pydantic import BaseModel, ConfigDict, Field

from bugsage.schemas.common import Envelope


class AuthRequest(BaseModel):
    """
    POST /auth body. The action selects login, register or logout; the other
    fields are only read by the action that needs them.
    """

    model_config = ConfigDict(populate_by_name=True)

    action: str = Field(default="", description="login | register | logout")
    username: str = Field(default="", max_length=255, description="Username (login also accepts email)")
    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=128)
    confirm_password: str = Field(default="", max_length=128, alias="confirmPassword")


class UserOut(BaseModel):
    """Sanitized user view (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str


class AuthResponse(Envelope):
    user: UserOut


class SessionContext(BaseModel):
    """Authenticated identity attached to one request."""

    user_id: int
    username: str
    role: str
    email: str
    token: str = Field(repr=False)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
