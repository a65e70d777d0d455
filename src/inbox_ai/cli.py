"""Command-line interface for Inbox AI.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog

from inbox_ai import __version__
from inbox_ai.config import get_settings
from inbox_ai.intelligence.classifier import classify_email
from inbox_ai.storage import SqliteRepository
from inbox_ai.utils import configure_logging

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inbox-ai", description="Inbox AI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind host (default: settings host)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default: settings port)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    classify_parser = subparsers.add_parser(
        "classify",
        help="Categorize a single email with the rule-based classifier",
    )
    classify_parser.add_argument("--sender", required=True, help="Raw From header")
    classify_parser.add_argument("--subject", required=True, help="Subject line")
    classify_parser.add_argument("--body", default="", help="Plain-text body")

    stats_parser = subparsers.add_parser("stats", help="Show analytics for a SQLite database")
    stats_parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to the SQLite database (default: settings database_path)",
    )

    return parser


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("server_starting", host=host, port=port)

    uvicorn.run(
        "inbox_ai.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _cmd_classify(args: argparse.Namespace) -> int:
    result = classify_email(args.sender, args.subject, args.body)
    print(f"Category: {result.category.value}")
    print(f"Urgent: {'yes' if result.is_urgent else 'no'}")
    print(f"Summary: {result.summary}")
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    settings = get_settings()
    db_path: Path | None = args.db or settings.database_path
    if db_path is None:
        print("No database configured. Pass --db or set INBOX_AI_DATABASE_PATH.", file=sys.stderr)
        return 2

    repo = SqliteRepository(
        db_path,
        work_hour_start=settings.work_hour_start,
        work_hour_end=settings.work_hour_end,
    )
    repo.initialize()

    emails = repo.get_email_analytics()
    calendar = repo.get_calendar_analytics()

    print(f"Total emails: {emails.total_emails}")
    print(f"Unread: {emails.unread_count}")
    print(f"Urgent: {emails.urgent_count}")
    print("\nCategories:")
    for name, count in emails.category_breakdown.model_dump().items():
        print(f"- {name}: {count}")

    print(f"\nEvents today: {calendar.today_events}")
    print(f"Events this week: {calendar.week_events}")
    print(f"Upcoming events: {calendar.upcoming_events}")
    print("\nFree slots:")
    for slot in calendar.free_slots:
        print(
            f"- {slot.date.isoformat()} {slot.start_time.strftime('%H:%M')}-"
            f"{slot.end_time.strftime('%H:%M')} ({slot.duration_minutes} min)"
        )
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Inbox AI CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("inbox_ai_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    if parsed.command == "serve":
        return _cmd_serve(parsed)
    if parsed.command == "classify":
        return _cmd_classify(parsed)
    if parsed.command == "stats":
        return _cmd_stats(parsed)

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
