"""Reports: bug activity over a time range, per project and per assignee."""

from collections import defaultdict
from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Query, Session

from bugsage.core.errors import ValidationError
from bugsage.models import Bug, Project, User
from bugsage.models.bug import BUG_PRIORITIES, BUG_STATUSES
from bugsage.schemas.reports import (
    LabelledSeries,
    ProjectStats,
    ReportCharts,
    ReportResponse,
    ReportSummary,
    ReportTables,
    TeamMemberStats,
    TrendSeries,
)

# Range key -> days back from now (None = no lower bound).
RANGE_DAYS: dict[str, int | None] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "1y": 365,
    "all": None,
}
DEFAULT_RANGE = "30d"

HIGH_PERFORMANCE = 75.0
MEDIUM_PERFORMANCE = 50.0

SECONDS_PER_DAY = 86400


def range_cutoff(range_key: str, now: datetime | None = None) -> datetime | None:
    if range_key not in RANGE_DAYS:
        raise ValidationError(f"Invalid range; expected one of {', '.join(RANGE_DAYS)}")
    days = RANGE_DAYS[range_key]
    if days is None:
        return None
    return (now or datetime.now(timezone.utc)) - timedelta(days=days)


def _in_range(query: Query, cutoff: datetime | None) -> Query:
    if cutoff is None:
        return query
    return query.filter(Bug.created_at >= cutoff)


def _resolution_days(created_at: datetime | None, closed_at: datetime | None) -> float | None:
    """Days between report and close; None when the close time is unknown."""
    if created_at is None or closed_at is None:
        return None
    return max((closed_at - created_at).total_seconds(), 0) / SECONDS_PER_DAY


def _average(values: list[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


def _rate(part: int, whole: int) -> float:
    return round(part * 100.0 / whole, 1) if whole else 0.0


def performance_class(score: float) -> str:
    if score >= HIGH_PERFORMANCE:
        return "high"
    if score >= MEDIUM_PERFORMANCE:
        return "medium"
    return "low"


def _trend(db: Session, cutoff: datetime | None) -> TrendSeries:
    """Per-day counts of reported bugs and of bugs closed that day."""
    reported_day = func.date(Bug.created_at)
    reported = dict(
        _in_range(db.query(reported_day, func.count(Bug.id)), cutoff)
        .group_by(reported_day)
        .all()
    )
    closed_day = func.date(Bug.updated_at)
    resolved_query = db.query(closed_day, func.count(Bug.id)).filter(
        Bug.status == "closed", Bug.updated_at.isnot(None)
    )
    if cutoff is not None:
        resolved_query = resolved_query.filter(Bug.updated_at >= cutoff)
    resolved = dict(resolved_query.group_by(closed_day).all())

    # Postgres returns date objects, SQLite returns strings.
    reported = {str(k): v for k, v in reported.items()}
    resolved = {str(k): v for k, v in resolved.items()}
    labels = sorted(set(reported) | set(resolved))
    return TrendSeries(
        labels=labels,
        reported=[reported.get(day, 0) for day in labels],
        resolved=[resolved.get(day, 0) for day in labels],
    )


def _distribution(db: Session, column, keys: tuple[str, ...], cutoff: datetime | None) -> LabelledSeries:
    counts = dict(_in_range(db.query(column, func.count(Bug.id)), cutoff).group_by(column).all())
    return LabelledSeries(labels=list(keys), values=[counts.get(k, 0) for k in keys])


def _project_table(db: Session, cutoff: datetime | None) -> list[ProjectStats]:
    join_on = Bug.project_id == Project.id
    if cutoff is not None:
        join_on = and_(join_on, Bug.created_at >= cutoff)

    def status_sum(status: str):
        return func.coalesce(func.sum(case((Bug.status == status, 1), else_=0)), 0)

    rows = (
        db.query(
            Project.id,
            Project.name,
            func.count(Bug.id),
            status_sum("open"),
            status_sum("in-progress"),
            status_sum("closed"),
        )
        .outerjoin(Bug, join_on)
        .group_by(Project.id, Project.name)
        .order_by(Project.name)
        .all()
    )
    return [
        ProjectStats(
            id=project_id,
            name=name,
            total_bugs=total,
            open_bugs=open_count,
            in_progress_bugs=in_progress,
            resolved_bugs=closed,
            resolution_rate=_rate(closed, total),
        )
        for project_id, name, total, open_count, in_progress, closed in rows
    ]


def _team_table(db: Session, cutoff: datetime | None) -> list[TeamMemberStats]:
    rows = (
        _in_range(
            db.query(User.id, User.username, Bug.status, Bug.created_at, Bug.updated_at)
            .join(Bug, Bug.assigned_to == User.id),
            cutoff,
        )
        .all()
    )
    names: dict[int, str] = {}
    assigned: dict[int, int] = defaultdict(int)
    resolved: dict[int, int] = defaultdict(int)
    durations: dict[int, list[float]] = defaultdict(list)
    for user_id, username, status, created_at, updated_at in rows:
        names[user_id] = username
        assigned[user_id] += 1
        if status == "closed":
            resolved[user_id] += 1
            days = _resolution_days(created_at, updated_at)
            if days is not None:
                durations[user_id].append(days)

    team = []
    for user_id in sorted(names, key=lambda uid: names[uid].lower()):
        score = _rate(resolved[user_id], assigned[user_id])
        team.append(
            TeamMemberStats(
                id=user_id,
                name=names[user_id],
                assigned_bugs=assigned[user_id],
                resolved_bugs=resolved[user_id],
                avg_resolution_time=_average(durations[user_id]),
                performance_score=score,
                performance_class=performance_class(score),
            )
        )
    return team


def build_report(db: Session, range_key: str = DEFAULT_RANGE) -> ReportResponse:
    """Summary cards, charts and tables for bugs reported within range_key."""
    cutoff = range_cutoff(range_key)

    def count(*criteria) -> int:
        return _in_range(db.query(func.count(Bug.id)), cutoff).filter(*criteria).scalar() or 0

    closed_rows = (
        _in_range(db.query(Bug.created_at, Bug.updated_at), cutoff)
        .filter(Bug.status == "closed")
        .all()
    )
    durations = [
        days
        for days in (_resolution_days(created, closed) for created, closed in closed_rows)
        if days is not None
    ]

    summary = ReportSummary(
        total_bugs=count(),
        resolved_bugs=count(Bug.status == "closed"),
        critical_bugs=count(Bug.priority == "high", Bug.status != "closed"),
        avg_resolution_time=_average(durations),
    )
    charts = ReportCharts(
        trend=_trend(db, cutoff),
        status=_distribution(db, Bug.status, BUG_STATUSES, cutoff),
        priority=_distribution(db, Bug.priority, BUG_PRIORITIES, cutoff),
    )
    tables = ReportTables(
        projects=_project_table(db, cutoff),
        team=_team_table(db, cutoff),
    )
    return ReportResponse(range=range_key, summary=summary, charts=charts, tables=tables)
