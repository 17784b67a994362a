"""Bug endpoints: list, detail, duplicate check, create, update, delete and Kanban status changes."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from bugsage.api.v1.auth import get_current_user, require_admin
from bugsage.core.config import Settings, get_settings
from bugsage.core.database import get_db
from bugsage.core.errors import ValidationError
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.bugs import (
    BugCreate,
    BugListResponse,
    BugResponse,
    BugStatusUpdate,
    BugUpdate,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
)
from bugsage.schemas.common import Envelope, IdRequest
from bugsage.services import bugs as bug_service
from bugsage.services.bugs import BugFilters

router = APIRouter()


def _optional_int(name: str, raw: str | None) -> int | None:
    """Empty query values mean "no filter"; anything else must be an integer."""
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer") from e


def _optional_str(raw: str | None) -> str | None:
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@router.get("", response_model=BugListResponse)
def list_bugs(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    _user: Annotated[SessionContext, Depends(get_current_user)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    project_id: Annotated[str | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
    priority: Annotated[str | None, Query()] = None,
    assigned_to: Annotated[str | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=200)] = None,
    sort: Annotated[str | None, Query()] = None,
    order: Annotated[str | None, Query()] = None,
) -> BugListResponse:
    """
    Return one page of bugs with project and assignee names.

    Filters are optional and combined with AND; search matches title or
    description, case-insensitively. sort is one of id, title, priority,
    status, project, assignee, created_at, updated_at and order is asc or
    desc; both default to newest first. page/limit fall back to 1 and the
    configured page size when missing, non-numeric or not positive.
    """
    filters = BugFilters(
        project_id=_optional_int("project_id", project_id),
        status=_optional_str(status),
        priority=_optional_str(priority),
        assigned_to=_optional_int("assigned_to", assigned_to),
        search=_optional_str(search),
    )
    bug_sort = bug_service.resolve_sort(_optional_str(sort), _optional_str(order))
    page_num, page_size = bug_service.resolve_page_args(page, limit, settings)
    bugs, pagination = bug_service.list_bugs(db, filters, page_num, page_size, bug_sort)
    return BugListResponse(bugs=bugs, pagination=pagination)


@router.post("", response_model=BugResponse)
def create_bug(
    body: BugCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[SessionContext, Depends(get_current_user)],
) -> BugResponse:
    bug = bug_service.create_bug(db, current_user, body)
    return BugResponse(message="Bug created successfully", bug=bug)


@router.put("", response_model=Envelope)
def update_bug(
    body: BugUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[SessionContext, Depends(get_current_user)],
) -> Envelope:
    """Partial update; allowed for admins, the assignee and the reporter."""
    bug_service.update_bug(db, current_user, body)
    return Envelope(message="Bug updated successfully")


@router.delete("", response_model=Envelope)
def delete_bug(
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[SessionContext, Depends(require_admin)],
    body: Annotated[IdRequest | None, Body()] = None,
) -> Envelope:
    bug_service.delete_bug(db, admin, body.id if body else 0)
    return Envelope(message="Bug deleted successfully")


@router.post("/status", response_model=Envelope)
def update_bug_status(
    body: BugStatusUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[SessionContext, Depends(get_current_user)],
) -> Envelope:
    """Kanban drop: status must be one of open, in-progress, testing, closed."""
    bug_service.update_bug_status(db, current_user, body.bug_id, body.status)
    return Envelope(message="Bug status updated successfully")


@router.post("/check-duplicates", response_model=DuplicateCheckResponse)
def check_duplicates(
    body: DuplicateCheckRequest,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[SessionContext, Depends(get_current_user)],
) -> DuplicateCheckResponse:
    """Bugs not yet closed whose title resembles body.title; titles under 10 characters return none."""
    return DuplicateCheckResponse(duplicates=bug_service.find_similar_bugs(db, body.title))


@router.get("/{bug_id}", response_model=BugResponse)
def get_bug(
    bug_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[SessionContext, Depends(get_current_user)],
) -> BugResponse:
    return BugResponse(bug=bug_service.get_bug(db, bug_id))
