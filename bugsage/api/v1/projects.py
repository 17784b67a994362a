"""Project endpoints: everyone lists, admins create, update and delete."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from bugsage.api.v1.auth import get_current_user, require_admin
from bugsage.core.database import get_db
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.common import Envelope, IdRequest
from bugsage.schemas.projects import (
    ProjectCreate,
    ProjectCreatedResponse,
    ProjectListResponse,
    ProjectUpdate,
)
from bugsage.services import projects as project_service

router = APIRouter()


@router.get("", response_model=ProjectListResponse)
def list_projects(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[SessionContext, Depends(get_current_user)],
) -> ProjectListResponse:
    """All projects with bug counts, newest first."""
    return ProjectListResponse(projects=project_service.list_projects(db))


@router.post("", response_model=ProjectCreatedResponse)
def create_project(
    body: ProjectCreate,
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[SessionContext, Depends(require_admin)],
) -> ProjectCreatedResponse:
    project_id = project_service.create_project(db, admin, body)
    return ProjectCreatedResponse(message="Project created successfully", project_id=project_id)


@router.put("", response_model=Envelope)
def update_project(
    body: ProjectUpdate,
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[SessionContext, Depends(require_admin)],
) -> Envelope:
    project_service.update_project(db, admin, body)
    return Envelope(message="Project updated successfully")


@router.delete("", response_model=Envelope)
def delete_project(
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[SessionContext, Depends(require_admin)],
    body: Annotated[IdRequest | None, Body()] = None,
) -> Envelope:
    """Refused with a conflict while any bug still belongs to the project."""
    project_service.delete_project(db, admin, body.id if body else 0)
    return Envelope(message="Project deleted successfully")
