"""Project CRUD. Listing is open to every user; changes are admin only."""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bugsage.core.database import apply_partial_update
from bugsage.core.errors import Conflict, NotFound, ValidationError
from bugsage.models import Bug, Project
from bugsage.models.project import PROJECT_STATUSES
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.projects import ProjectCreate, ProjectOut, ProjectUpdate

logger = logging.getLogger(__name__)

HAS_BUGS_MESSAGE = "Cannot delete project with existing bugs"


def list_projects(db: Session) -> list[ProjectOut]:
    """All projects with their bug counts, newest first."""
    rows = (
        db.query(Project, func.count(Bug.id).label("bug_count"))
        .outerjoin(Bug, Bug.project_id == Project.id)
        .group_by(Project.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )
    return [
        ProjectOut.model_validate(project).model_copy(update={"bug_count": bug_count})
        for project, bug_count in rows
    ]


def _check_status(status: str) -> str:
    if status not in PROJECT_STATUSES:
        raise ValidationError("Invalid project status")
    return status


def create_project(db: Session, ctx: SessionContext, body: ProjectCreate) -> int:
    if not body.name:
        raise ValidationError("Project name is required")
    project = Project(
        name=body.name,
        description=body.description,
        status=_check_status(body.status or "active"),
    )
    db.add(project)
    db.commit()
    logger.info("Project created: project_id=%s by=%s", project.id, ctx.user_id)
    return project.id


def update_project(db: Session, ctx: SessionContext, body: ProjectUpdate) -> None:
    """Apply present, non-empty fields. A missing id is NotFound, same as bugs."""
    if not body.id:
        raise ValidationError("Project ID is required")
    values: dict[str, Any] = {}
    if body.name:
        values["name"] = body.name
    if body.description:
        values["description"] = body.description
    if body.status:
        values["status"] = _check_status(body.status)
    if not values:
        raise ValidationError("No fields to update")

    if apply_partial_update(db, Project, body.id, values) == 0:
        db.rollback()
        raise NotFound("Project not found")
    db.commit()
    logger.info("Project updated: project_id=%s fields=%s by=%s", body.id, sorted(values), ctx.user_id)


def delete_project(db: Session, ctx: SessionContext, project_id: int) -> None:
    """
    Delete a project that no bug references.

    The count gives the caller a clear message; the RESTRICT foreign key
    rejects a bug inserted between the count and the delete, inside the same
    transaction, and that is reported as the same conflict.
    """
    if not project_id:
        raise ValidationError("Project ID is required")
    bug_count = db.query(func.count(Bug.id)).filter(Bug.project_id == project_id).scalar()
    if bug_count:
        raise Conflict(HAS_BUGS_MESSAGE)
    try:
        deleted = (
            db.query(Project)
            .filter(Project.id == project_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            db.rollback()
            raise NotFound("Project not found")
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict(HAS_BUGS_MESSAGE) from e
    logger.info("Project deleted: project_id=%s by=%s", project_id, ctx.user_id)
