"""
Client views: fetch JSON through BugSageClient and render it as plain-text
tables for a terminal. Views hold no database access; every change goes
through the API.
"""

import logging
from typing import Any

from bugsage.client.api import BugSageClient

logger = logging.getLogger(__name__)

# Kanban columns, left to right.
KANBAN_COLUMNS = ("open", "in-progress", "testing", "closed")
COLUMN_TITLES = {
    "open": "Open",
    "in-progress": "In Progress",
    "testing": "Testing",
    "closed": "Closed",
}

# Largest page the API serves by default configuration.
FETCH_PAGE_SIZE = 100


class CardNotFound(LookupError):
    """The bug is not among the cards loaded on this board."""

    def __init__(self, bug_id: int) -> None:
        self.bug_id = bug_id
        super().__init__(f"Bug #{bug_id} is not on this board")


def render_table(headers: list[str], rows: list[list[Any]], empty: str = "(none)") -> str:
    """Left-aligned fixed-width table; None renders as '-'."""
    if not rows:
        return empty
    cells = [["-" if v is None else str(v) for v in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(value))
    lines = [
        "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)),
        "  ".join("-" * w for w in widths),
    ]
    lines.extend("  ".join(v.ljust(widths[i]) for i, v in enumerate(row)) for row in cells)
    return "\n".join(lines)


def _bug_rows(bugs: list[dict[str, Any]]) -> list[list[Any]]:
    return [
        [
            b["id"],
            b["title"],
            b.get("project_name"),
            b["priority"],
            b["status"],
            b.get("assigned_to_name"),
        ]
        for b in bugs
    ]


BUG_HEADERS = ["ID", "Title", "Project", "Priority", "Status", "Assignee"]


def fetch_all_bugs(client: BugSageClient, **filters: Any) -> list[dict[str, Any]]:
    """Walk every page of GET /bugs for the given filters."""
    bugs: list[dict[str, Any]] = []
    page = 1
    while True:
        result = client.list_bugs(page=page, limit=FETCH_PAGE_SIZE, **filters)
        bugs.extend(result["bugs"])
        if page >= result["pagination"]["pages"]:
            return bugs
        page += 1


class DashboardView:
    """Stat cards, recent bugs, the caller's bugs and the two distributions."""

    def __init__(self, client: BugSageClient) -> None:
        self.client = client
        self.data: dict[str, Any] = {}

    def load(self) -> "DashboardView":
        self.data = self.client.dashboard()
        return self

    def render(self) -> str:
        stats = self.data["stats"]
        cards = [
            ("Total bugs", stats["total_bugs"]),
            ("Open", stats["open_bugs"]),
            ("In progress", stats["in_progress_bugs"]),
            ("Resolved", stats["resolved_bugs"]),
            ("Critical", stats["critical_bugs"]),
            ("Active projects", stats["total_projects"]),
        ]
        charts = self.data["charts"]
        parts = [
            "  ".join(f"{label}: {value}" for label, value in cards),
            "",
            "Recent bugs",
            render_table(BUG_HEADERS, _bug_rows(self.data["recent_bugs"])),
            "",
            "My bugs",
            render_table(BUG_HEADERS, _bug_rows(self.data["my_bugs"])),
            "",
            "By status: "
            + ", ".join(f"{d['status']}={d['count']}" for d in charts["status_distribution"]),
            "By priority: "
            + ", ".join(f"{d['priority']}={d['count']}" for d in charts["priority_distribution"]),
        ]
        return "\n".join(parts)


class BugListView:
    """One page of the filtered bug list."""

    def __init__(
        self,
        client: BugSageClient,
        page: int = 1,
        limit: int | None = None,
        **filters: Any,
    ) -> None:
        self.client = client
        self.page = page
        self.limit = limit
        self.filters = filters
        self.bugs: list[dict[str, Any]] = []
        self.pagination: dict[str, Any] = {}

    def load(self) -> "BugListView":
        result = self.client.list_bugs(page=self.page, limit=self.limit, **self.filters)
        self.bugs = result["bugs"]
        self.pagination = result["pagination"]
        return self

    def render(self) -> str:
        p = self.pagination
        footer = f"Page {p['page']} of {max(p['pages'], 1)} ({p['total']} bugs)"
        return render_table(BUG_HEADERS, _bug_rows(self.bugs), empty="No bugs found") + "\n" + footer


class KanbanBoard:
    """
    Bugs grouped into the four status columns.

    move() is the drag-and-drop: the card only changes column after the API
    accepted the new status, so a refused move leaves the board as it was.
    """

    def __init__(self, client: BugSageClient, project_id: int | None = None) -> None:
        self.client = client
        self.project_id = project_id
        self.columns: dict[str, list[dict[str, Any]]] = {c: [] for c in KANBAN_COLUMNS}

    def load(self) -> "KanbanBoard":
        self.columns = {c: [] for c in KANBAN_COLUMNS}
        for bug in fetch_all_bugs(self.client, project_id=self.project_id):
            # Rows with a status outside the board are not shown.
            if bug["status"] in self.columns:
                self.columns[bug["status"]].append(bug)
        return self

    def find(self, bug_id: int) -> dict[str, Any] | None:
        for cards in self.columns.values():
            for card in cards:
                if card["id"] == bug_id:
                    return card
        return None

    def move(self, bug_id: int, status: str) -> None:
        card = self.find(bug_id)
        if card is None:
            raise CardNotFound(bug_id)
        if card["status"] == status:
            return
        self.client.update_bug_status(bug_id, status)
        self.columns[card["status"]].remove(card)
        card["status"] = status
        self.columns[status].insert(0, card)
        logger.info("Moved bug %s to %s", bug_id, status)

    def render(self) -> str:
        parts = []
        for column in KANBAN_COLUMNS:
            cards = self.columns[column]
            parts.append(f"== {COLUMN_TITLES[column]} ({len(cards)})")
            for card in cards:
                assignee = card.get("assigned_to_name") or "unassigned"
                parts.append(f"  #{card['id']} [{card['priority']}] {card['title']} ({assignee})")
        return "\n".join(parts)


class ReportsView:
    """Summary cards plus the project and team tables for one time range."""

    def __init__(self, client: BugSageClient, range_key: str = "30d") -> None:
        self.client = client
        self.range_key = range_key
        self.data: dict[str, Any] = {}

    def load(self) -> "ReportsView":
        self.data = self.client.report(self.range_key)
        return self

    def render(self) -> str:
        summary = self.data["summary"]
        tables = self.data["tables"]
        project_rows = [
            [
                p["name"],
                p["total_bugs"],
                p["open_bugs"],
                p["in_progress_bugs"],
                p["resolved_bugs"],
                f"{p['resolution_rate']}%",
            ]
            for p in tables["projects"]
        ]
        team_rows = [
            [
                m["name"],
                m["assigned_bugs"],
                m["resolved_bugs"],
                f"{m['avg_resolution_time']} days",
                f"{m['performance_score']}% ({m['performance_class']})",
            ]
            for m in tables["team"]
        ]
        return "\n".join(
            [
                f"Range: {self.data['range']}",
                f"Total: {summary['total_bugs']}  Resolved: {summary['resolved_bugs']}  "
                f"Critical: {summary['critical_bugs']}  "
                f"Avg resolution: {summary['avg_resolution_time']} days",
                "",
                "Projects",
                render_table(["Project", "Total", "Open", "In progress", "Resolved", "Rate"], project_rows),
                "",
                "Team",
                render_table(["Member", "Assigned", "Resolved", "Avg time", "Performance"], team_rows),
            ]
        )


class AdminView:
    """Users and projects tables for administrators."""

    def __init__(self, client: BugSageClient) -> None:
        self.client = client
        self.users: list[dict[str, Any]] = []
        self.projects: list[dict[str, Any]] = []

    def load(self) -> "AdminView":
        self.users = self.client.list_users()
        self.projects = self.client.list_projects()
        return self

    def render(self) -> str:
        user_rows = [[u["id"], u["username"], u["email"], u["role"], u["status"]] for u in self.users]
        project_rows = [
            [p["id"], p["name"], p.get("description") or "No description", p["status"], p.get("bug_count", 0)]
            for p in self.projects
        ]
        return "\n".join(
            [
                "Users",
                render_table(["ID", "Username", "Email", "Role", "Status"], user_rows),
                "",
                "Projects",
                render_table(["ID", "Name", "Description", "Status", "Bugs"], project_rows),
            ]
        )
