"""Dashboard aggregates: headline counts, recent bugs and chart distributions."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from bugsage.models import Bug, Project
from bugsage.schemas.auth import SessionContext
from bugsage.schemas.dashboard import (
    DashboardCharts,
    DashboardResponse,
    DashboardStats,
    PriorityCount,
    StatusCount,
)
from bugsage.services.bugs import recent_bugs

RECENT_LIMIT = 10


def _count(db: Session, *criteria) -> int:
    return db.query(func.count(Bug.id)).filter(*criteria).scalar() or 0


def build_dashboard(db: Session, ctx: SessionContext) -> DashboardResponse:
    """
    Everything the dashboard renders in one payload.

    my_bugs is only computed for non-admin callers; admins get an empty list.
    """
    stats = DashboardStats(
        total_bugs=_count(db),
        open_bugs=_count(db, Bug.status == "open"),
        in_progress_bugs=_count(db, Bug.status == "in-progress"),
        resolved_bugs=_count(db, Bug.status == "closed"),
        critical_bugs=_count(db, Bug.priority == "high", Bug.status != "closed"),
        total_projects=db.query(func.count(Project.id))
        .filter(Project.status == "active")
        .scalar()
        or 0,
    )

    my_bugs = [] if ctx.is_admin else recent_bugs(db, RECENT_LIMIT, assigned_to=ctx.user_id)

    status_rows = db.query(Bug.status, func.count(Bug.id)).group_by(Bug.status).all()
    priority_rows = db.query(Bug.priority, func.count(Bug.id)).group_by(Bug.priority).all()

    return DashboardResponse(
        stats=stats,
        recent_bugs=recent_bugs(db, RECENT_LIMIT),
        my_bugs=my_bugs,
        charts=DashboardCharts(
            status_distribution=[StatusCount(status=s, count=c) for s, c in status_rows],
            priority_distribution=[PriorityCount(priority=p, count=c) for p, c in priority_rows],
        ),
    )
