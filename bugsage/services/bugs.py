"""Bug CRUD: filtered listing, creation, partial updates, status changes, deletion."""

import logging
import math
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, or_
from sqlalchemy.orm import Query, Session, aliased

from bugsage.core.database import apply_partial_update
from bugsage.core.errors import NotFound, PermissionDenied, ValidationError
from bugsage.models import Bug, Project, User
from bugsage.models.bug import BUG_PRIORITIES, BUG_STATUSES
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.bugs import BugCreate, BugOut, BugSummary, BugUpdate, Pagination

if TYPE_CHECKING:
    from bugsage.core.config import Settings

logger = logging.getLogger(__name__)

Assignee = aliased(User, name="assignee")
Reporter = aliased(User, name="reporter")

DEFAULT_SORT = "created_at"
DEFAULT_ORDER = "desc"
SORT_ORDERS = ("asc", "desc")

# Sortable columns; priority and status sort by rank, not alphabetically.
SORT_COLUMNS: dict[str, Any] = {
    "id": Bug.id,
    "title": Bug.title,
    "priority": case({p: i for i, p in enumerate(BUG_PRIORITIES)}, value=Bug.priority, else_=-1),
    "status": case({s: i for i, s in enumerate(BUG_STATUSES)}, value=Bug.status, else_=-1),
    "project": Project.name,
    "assignee": Assignee.username,
    "created_at": Bug.created_at,
    "updated_at": Bug.updated_at,
}

# Duplicate check: titles shorter than this are not compared.
DUPLICATE_MIN_TITLE = 10
DUPLICATE_MIN_RATIO = 0.6
DUPLICATE_LIMIT = 5

# Upper bound for a requested page so the row offset always fits a 64-bit integer.
MAX_PAGE_NUMBER = 2**31 - 1


@dataclass(frozen=True)
class BugFilters:
    """Conjunction of optional filters; None means the filter is not applied."""

    project_id: int | None = None
    status: str | None = None
    priority: str | None = None
    assigned_to: int | None = None
    search: str | None = None


@dataclass(frozen=True)
class BugSort:
    field: str = DEFAULT_SORT
    order: str = DEFAULT_ORDER


def resolve_sort(field: str | None, order: str | None) -> BugSort:
    """Validate sort/order against the whitelist; missing values mean newest first."""
    field = field or DEFAULT_SORT
    order = (order or DEFAULT_ORDER).lower()
    if field not in SORT_COLUMNS:
        raise ValidationError(f"Invalid sort field; expected one of {', '.join(SORT_COLUMNS)}")
    if order not in SORT_ORDERS:
        raise ValidationError("Invalid sort order; expected asc or desc")
    return BugSort(field=field, order=order)


def _positive_int(raw: Any, default: int) -> int:
    """Coerce a query value to a positive int, falling back to default."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def resolve_page_args(page: Any, limit: Any, settings: "Settings") -> tuple[int, int]:
    """
    Page defaults to 1 and limit to BUGS_PER_PAGE.

    limit is capped at MAX_PAGE_SIZE and page at MAX_PAGE_NUMBER.
    """
    page_num = min(_positive_int(page, 1), MAX_PAGE_NUMBER)
    page_size = min(_positive_int(limit, settings.BUGS_PER_PAGE), settings.MAX_PAGE_SIZE)
    return page_num, page_size


def _joined_query(db: Session) -> Query:
    return (
        db.query(
            Bug,
            Project.name.label("project_name"),
            Assignee.username.label("assigned_to_name"),
            Reporter.username.label("reported_by_name"),
        )
        .outerjoin(Project, Bug.project_id == Project.id)
        .outerjoin(Assignee, Bug.assigned_to == Assignee.id)
        .outerjoin(Reporter, Bug.reported_by == Reporter.id)
    )


def _to_bug_out(row: Any) -> BugOut:
    bug, project_name, assigned_to_name, reported_by_name = row
    return BugOut.model_validate(bug).model_copy(
        update={
            "project_name": project_name,
            "assigned_to_name": assigned_to_name,
            "reported_by_name": reported_by_name,
        }
    )


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _apply_filters(query: Query, filters: BugFilters) -> Query:
    if filters.project_id is not None:
        query = query.filter(Bug.project_id == filters.project_id)
    if filters.status is not None:
        query = query.filter(Bug.status == filters.status)
    if filters.priority is not None:
        query = query.filter(Bug.priority == filters.priority)
    if filters.assigned_to is not None:
        query = query.filter(Bug.assigned_to == filters.assigned_to)
    if filters.search:
        pattern = _like_pattern(filters.search)
        query = query.filter(
            or_(
                Bug.title.ilike(pattern, escape="\\"),
                Bug.description.ilike(pattern, escape="\\"),
            )
        )
    return query


def newest_first(query: Query) -> Query:
    """Creation time descending; id breaks ties between rows created in the same instant."""
    return query.order_by(Bug.created_at.desc(), Bug.id.desc())


def _sorted(query: Query, sort: BugSort) -> Query:
    column = SORT_COLUMNS[sort.field]
    primary = column.asc() if sort.order == "asc" else column.desc()
    return query.order_by(primary, Bug.id.desc())


def list_bugs(
    db: Session,
    filters: BugFilters,
    page: int,
    limit: int,
    sort: BugSort | None = None,
) -> tuple[list[BugOut], Pagination]:
    """
    Return one page of bugs and the pagination block.

    A page past the last one is empty; its offset is never sent to the database.
    """
    total = _apply_filters(db.query(Bug), filters).count()
    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit),
    )
    offset = (page - 1) * limit
    if offset >= total:
        return [], pagination
    rows = (
        _sorted(_apply_filters(_joined_query(db), filters), sort or BugSort())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return [_to_bug_out(row) for row in rows], pagination


def recent_bugs(db: Session, limit: int, assigned_to: int | None = None) -> list[BugOut]:
    """Newest bugs, optionally only those assigned to one user."""
    filters = BugFilters(assigned_to=assigned_to)
    rows = newest_first(_apply_filters(_joined_query(db), filters)).limit(limit).all()
    return [_to_bug_out(row) for row in rows]


def _normalise_title(title: str) -> str:
    return " ".join(title.lower().split())


def find_similar_bugs(db: Session, title: str) -> list[BugSummary]:
    """
    Unclosed bugs whose title resembles title, best match first.

    Titles under DUPLICATE_MIN_TITLE characters are not checked.
    """
    wanted = _normalise_title(title or "")
    if len(wanted) < DUPLICATE_MIN_TITLE:
        return []
    candidates = (
        db.query(Bug.id, Bug.title, Bug.priority, Bug.status)
        .filter(Bug.status != "closed")
        .all()
    )
    scored = []
    for bug_id, bug_title, priority, status in candidates:
        existing = _normalise_title(bug_title)
        if len(existing) >= DUPLICATE_MIN_TITLE and (wanted in existing or existing in wanted):
            ratio = 1.0
        else:
            ratio = SequenceMatcher(None, wanted, existing).ratio()
        if ratio >= DUPLICATE_MIN_RATIO:
            scored.append((ratio, bug_id, bug_title, priority, status))
    scored.sort(key=lambda item: (-item[0], -item[1]))
    return [
        BugSummary(id=bug_id, title=bug_title, priority=priority, status=status)
        for _, bug_id, bug_title, priority, status in scored[:DUPLICATE_LIMIT]
    ]


def get_bug(db: Session, bug_id: int) -> BugOut:
    row = _joined_query(db).filter(Bug.id == bug_id).first()
    if row is None:
        raise NotFound("Bug not found")
    return _to_bug_out(row)


def _ensure_user_exists(db: Session, user_id: int) -> None:
    if db.get(User, user_id) is None:
        raise ValidationError("Assigned user not found")


def create_bug(db: Session, ctx: SessionContext, body: BugCreate) -> BugOut:
    """
    Create an open bug reported by the caller.

    Priority defaults to medium; an assigned_to of 0 or null leaves it unassigned.
    """
    if not body.title or not body.description or not body.project_id:
        raise ValidationError("Title, description, and project are required")
    priority = body.priority or "medium"
    if priority not in BUG_PRIORITIES:
        raise ValidationError("Invalid priority")
    if db.get(Project, body.project_id) is None:
        raise NotFound("Project not found")
    assigned_to = body.assigned_to or None
    if assigned_to is not None:
        _ensure_user_exists(db, assigned_to)

    bug = Bug(
        title=body.title,
        description=body.description,
        project_id=body.project_id,
        priority=priority,
        status="open",
        assigned_to=assigned_to,
        reported_by=ctx.user_id,
    )
    db.add(bug)
    db.commit()
    logger.info("Bug created: bug_id=%s project_id=%s by=%s", bug.id, bug.project_id, ctx.user_id)
    return get_bug(db, bug.id)


def _load_for_change(db: Session, ctx: SessionContext, bug_id: int) -> Bug:
    """Fetch a bug the caller may modify: admin, its assignee or its reporter."""
    bug = db.get(Bug, bug_id)
    if bug is None:
        raise NotFound("Bug not found")
    if not ctx.is_admin and ctx.user_id not in (bug.assigned_to, bug.reported_by):
        logger.warning("Bug change denied: bug_id=%s user_id=%s", bug_id, ctx.user_id)
        raise PermissionDenied()
    return bug


def _update_values(db: Session, body: BugUpdate) -> dict[str, Any]:
    """Translate the typed partial update into column values."""
    values: dict[str, Any] = {}
    if body.title:
        values["title"] = body.title
    if body.description:
        values["description"] = body.description
    if body.priority:
        if body.priority not in BUG_PRIORITIES:
            raise ValidationError("Invalid priority")
        values["priority"] = body.priority
    if body.status:
        if body.status not in BUG_STATUSES:
            raise ValidationError("Invalid status")
        values["status"] = body.status
    if "assigned_to" in body.model_fields_set:
        assigned_to = body.assigned_to or None
        if assigned_to is not None:
            _ensure_user_exists(db, assigned_to)
        values["assigned_to"] = assigned_to
    return values


def update_bug(db: Session, ctx: SessionContext, body: BugUpdate) -> None:
    if not body.id:
        raise ValidationError("Bug ID is required")
    _load_for_change(db, ctx, body.id)
    values = _update_values(db, body)
    if not values:
        raise ValidationError("No fields to update")
    apply_partial_update(db, Bug, body.id, values)
    db.commit()
    logger.info("Bug updated: bug_id=%s fields=%s by=%s", body.id, sorted(values), ctx.user_id)


def update_bug_status(db: Session, ctx: SessionContext, bug_id: int, status: str) -> None:
    """Move a bug to another Kanban column."""
    if not bug_id or not status:
        raise ValidationError("Bug ID and status are required")
    if status not in BUG_STATUSES:
        raise ValidationError("Invalid status")
    _load_for_change(db, ctx, bug_id)
    apply_partial_update(db, Bug, bug_id, {"status": status})
    db.commit()
    logger.info("Bug status changed: bug_id=%s status=%s by=%s", bug_id, status, ctx.user_id)


def delete_bug(db: Session, ctx: SessionContext, bug_id: int) -> None:
    """Admin only; the role check happens in the route dependency."""
    if not bug_id:
        raise ValidationError("Bug ID is required")
    deleted = (
        db.query(Bug).filter(Bug.id == bug_id).delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        raise NotFound("Bug not found")
    db.commit()
    logger.info("Bug deleted: bug_id=%s by=%s", bug_id, ctx.user_id)
