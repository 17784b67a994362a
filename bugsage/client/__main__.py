"""
Terminal client for a running BugSage API:

  python -m bugsage.client --username alice --password secret dashboard
  python -m bugsage.client kanban --project 1
  python -m bugsage.client move 42 testing

Credentials default to BUGSAGE_USERNAME / BUGSAGE_PASSWORD.
"""

import argparse
import logging
import os
import sys

import httpx

from bugsage.client.api import ApiError, BugSageClient
from bugsage.client.views import (
    KANBAN_COLUMNS,
    AdminView,
    CardNotFound,
    BugListView,
    DashboardView,
    KanbanBoard,
    ReportsView,
)

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bugsage.client", description="BugSage terminal views.")
    parser.add_argument("--base-url", default=os.getenv("BUGSAGE_URL", "http://localhost:8000"))
    parser.add_argument("--username", default=os.getenv("BUGSAGE_USERNAME"))
    parser.add_argument("--password", default=os.getenv("BUGSAGE_PASSWORD"))
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("dashboard", help="Stat cards, recent and assigned bugs")

    bugs = sub.add_parser("bugs", help="Filtered, paginated bug list")
    bugs.add_argument("--project", type=int)
    bugs.add_argument("--status", choices=KANBAN_COLUMNS)
    bugs.add_argument("--priority", choices=("low", "medium", "high"))
    bugs.add_argument("--assigned-to", type=int)
    bugs.add_argument("--search", help="Match title or description")
    bugs.add_argument(
        "--sort",
        choices=("id", "title", "priority", "status", "project", "assignee", "created_at", "updated_at"),
    )
    bugs.add_argument("--order", choices=("asc", "desc"))
    bugs.add_argument("--page", type=int, default=1)
    bugs.add_argument("--limit", type=int)

    kanban = sub.add_parser("kanban", help="Bugs by status column")
    kanban.add_argument("--project", type=int)

    move = sub.add_parser("move", help="Move a bug to another status column")
    move.add_argument("bug_id", type=int)
    move.add_argument("status", choices=KANBAN_COLUMNS)

    reports = sub.add_parser("reports", help="Summary, project and team tables")
    reports.add_argument("--range", dest="range_key", default="30d", choices=("7d", "30d", "90d", "1y", "all"))

    sub.add_parser("admin", help="Users and projects (admin only)")
    return parser


def run(args: argparse.Namespace, client: BugSageClient) -> str:
    """Execute one command against a logged-in client and return the rendered text."""
    if args.command == "dashboard":
        return DashboardView(client).load().render()
    if args.command == "bugs":
        view = BugListView(
            client,
            page=args.page,
            limit=args.limit,
            project_id=args.project,
            status=args.status,
            priority=args.priority,
            assigned_to=args.assigned_to,
            search=args.search,
            sort=args.sort,
            order=args.order,
        )
        return view.load().render()
    if args.command == "kanban":
        return KanbanBoard(client, project_id=args.project).load().render()
    if args.command == "move":
        board = KanbanBoard(client).load()
        board.move(args.bug_id, args.status)
        return board.render()
    if args.command == "reports":
        return ReportsView(client, args.range_key).load().render()
    if args.command == "admin":
        return AdminView(client).load().render()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s %(message)s")
    args = _parser().parse_args(argv)
    if not args.username or not args.password:
        print("Username and password are required (flags or BUGSAGE_USERNAME/BUGSAGE_PASSWORD).", file=sys.stderr)
        return 2
    with BugSageClient(base_url=args.base_url) as client:
        try:
            client.login(args.username, args.password)
            print(run(args, client))
        except ApiError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        except CardNotFound as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except httpx.HTTPError as e:
            print(f"Error: cannot reach {args.base_url}: {e}", file=sys.stderr)
            return 1
        finally:
            try:
                client.logout()
            except (ApiError, httpx.HTTPError):
                logger.warning("Logout failed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
