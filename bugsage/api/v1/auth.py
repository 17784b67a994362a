"""Session auth endpoints and dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from bugsage.core.config import Settings, get_settings
from bugsage.core.database import get_db
from bugsage.core.errors import PermissionDenied, Unauthenticated, ValidationError
from bugsage.schemas.auth import AuthRequest, AuthResponse, SessionContext, UserOut
from bugsage.schemas.common import Envelope
from bugsage.services import auth as auth_service
from bugsage.services.sessions import resolve_session

logger = logging.getLogger(__name__)
router = APIRouter()


def _session_token(request: Request, settings: Settings) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_session_context(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SessionContext | None:
    """Dependency: identity for this request, or None when there is no valid session."""
    return resolve_session(db, _session_token(request, settings))


def get_current_user(
    ctx: Annotated[SessionContext | None, Depends(get_session_context)],
) -> SessionContext:
    """Dependency: require a valid session. Raises Unauthenticated (401) otherwise."""
    if ctx is None:
        raise Unauthenticated()
    return ctx


def require_admin(
    current_user: Annotated[SessionContext, Depends(get_current_user)],
) -> SessionContext:
    """Dependency: require an authenticated admin. Raises PermissionDenied (403) otherwise."""
    if not current_user.is_admin:
        logger.warning("Admin access denied: user_id=%s", current_user.user_id)
        raise PermissionDenied("Admin access required")
    return current_user


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


@router.post("", response_model=AuthResponse | Envelope)
def post_auth(
    body: AuthRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    ctx: Annotated[SessionContext | None, Depends(get_session_context)],
) -> AuthResponse | Envelope:
    """
    Dispatch on body.action:

    - **login**: username (or email) + password; opens a session cookie.
    - **register**: username, email, password, confirmPassword; creates a
      regular user and logs them in.
    - **logout**: drops the current session; succeeds without one.
    """
    if body.action == "login":
        user, token = auth_service.login(db, body.username, body.password, settings)
        _set_session_cookie(response, token, settings)
        return AuthResponse(message="Login successful", user=UserOut.model_validate(user))
    if body.action == "register":
        user, token = auth_service.register(
            db,
            body.username,
            body.email,
            body.password,
            body.confirm_password,
            settings,
        )
        _set_session_cookie(response, token, settings)
        return AuthResponse(message="Registration successful", user=UserOut.model_validate(user))
    if body.action == "logout":
        auth_service.logout(db, _session_token(request, settings), ctx)
        response.delete_cookie(settings.SESSION_COOKIE_NAME)
        return Envelope(message="Logout successful")
    raise ValidationError("Invalid action")


@router.get("", response_model=AuthResponse)
def get_auth(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[SessionContext, Depends(get_current_user)],
) -> AuthResponse:
    """Return the logged-in user, read fresh from the database."""
    user = auth_service.current_user(db, current_user)
    return AuthResponse(user=UserOut.model_validate(user))
