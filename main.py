#!/usr/bin/env python3
"""Chronicle: activity feeds and progress narratives from markdown logs.

This CLI tool reads daily logs and per-project progress reports, then
produces a ranked activity feed, blog-style progress posts, and daily
updates aggregated across tracked projects.

Commands:
    activity       Show the activity feed extracted from recent daily logs
    progress       Generate a post from one local progress report
    list-progress  List local progress reports with parsed metadata
    daily          Aggregate tracked projects' reports for one date
    status         Show configuration

Examples:
    python main.py activity --limit 20
    python main.py progress 2025-11-20.md --format summary
    python main.py list-progress
    python main.py daily --date 2025-11-20 --save
    python main.py daily --local site=../site --local api=../api

Environment:
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path

from config import Config
from models.narrative import AggregateEmpty, DocumentFormat
from observability.logging import setup_logging
from observability.tracing import setup_tracing

logger = logging.getLogger(__name__)


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def cmd_activity(args: argparse.Namespace, config: Config) -> int:
    """Display the activity feed.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    from pipeline import build_activity_feed
    from sources.local import DirectoryLogSource

    if args.days:
        config.activity_max_age_days = args.days
    if args.limit:
        config.activity_limit = args.limit

    source = DirectoryLogSource(Path(args.dir) if args.dir else config.memory_dir)
    entries = build_activity_feed(source, config)

    if args.json:
        _print_json([entry.model_dump(mode="json") for entry in entries])
        return 0

    if not entries:
        print(f"No activity in the last {config.activity_max_age_days} days.")
        return 0

    for entry in entries:
        stamp = entry.timestamp.astimezone(config.activity_tz).strftime("%Y-%m-%d %H:%M")
        print(f"{stamp}  [{entry.category.value:<11}] {entry.action}  ({entry.source})")
    return 0


def cmd_progress(args: argparse.Namespace, config: Config) -> int:
    """Generate a post from a local progress report."""
    from errors import DocumentNotFound
    from pipeline import generate_from_progress_file
    from publisher import publish
    from sources.local import ProgressDirectory

    progress_dir = ProgressDirectory(Path(args.dir) if args.dir else config.progress_dir)
    try:
        doc = generate_from_progress_file(progress_dir, args.file, DocumentFormat(args.format))
    except (ValueError, DocumentNotFound) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        _print_json(doc.model_dump(mode="json", exclude={"source_reports"}))
    else:
        print(doc.body)

    if args.save:
        result = asyncio.run(publish(doc, config))
        if result.path:
            print(f"Saved: {result.path}", file=sys.stderr)
        return 0 if result.ok else 1
    return 0


def cmd_list_progress(args: argparse.Namespace, config: Config) -> int:
    """List local progress reports, newest first."""
    from pipeline import list_progress_files
    from sources.local import ProgressDirectory

    files = list_progress_files(ProgressDirectory(Path(args.dir) if args.dir else config.progress_dir))

    if args.json:
        _print_json([info.model_dump(mode="json") for info in files])
        return 0

    if not files:
        print("No progress reports found.")
        return 0

    for info in files:
        day = info.date.isoformat() if info.date else "----------"
        print(f"{day}  {info.path}")
        print(f"            {info.project_name} | tasks={info.task_count} issues={info.issue_count} size={info.size}B")
    return 0


def _parse_local_projects(values: list[str]) -> dict[str, Path]:
    """Parse ``ID=PATH`` pairs from --local options."""
    projects = {}
    for value in values:
        project_id, sep, path = value.partition("=")
        if not sep or not project_id or not path:
            raise ValueError(f"Invalid --local value '{value}' (expected ID=PATH)")
        projects[project_id] = Path(path)
    return projects


def cmd_daily(args: argparse.Namespace, config: Config) -> int:
    """Aggregate tracked projects' progress reports for one date."""
    from generators.daily import render_daily_update
    from pipeline import run_daily
    from publisher import publish

    try:
        day = date.fromisoformat(args.date) if args.date else date.today()
        local_projects = _parse_local_projects(args.local or [])
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.tracked_projects and not local_projects:
        print("No tracked projects configured (set TRACKED_PROJECTS or use --local).", file=sys.stderr)
        return 1

    async def run() -> int:
        outcome, stats = await run_daily(config, day, local_projects)
        logger.info("Run complete | stats=%s", json.dumps(stats.to_dict()))

        if isinstance(outcome, AggregateEmpty):
            if args.json:
                _print_json(outcome.model_dump(mode="json"))
            else:
                print(outcome.message)
                for failure in outcome.failures:
                    print(f"  ! {failure.project_id}: {failure.message}", file=sys.stderr)
            return 0

        doc = render_daily_update(outcome)
        if args.json:
            _print_json({
                "date": outcome.date.isoformat(),
                "aggregate_note": outcome.aggregate_note,
                "projects": outcome.project_ids,
                "failures": [failure.model_dump(mode="json") for failure in outcome.failures],
                "document": doc.model_dump(mode="json", exclude={"source_reports"}),
            })
        else:
            print(doc.body)

        if args.save:
            result = await publish(doc, config, slug=f"daily-update-{day.isoformat()}")
            return 0 if result.ok else 1
        return 0

    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")
        return 130


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display configuration."""
    status = {
        "sources": {
            "memory_dir": str(config.memory_dir),
            "progress_dir": str(config.progress_dir),
            "tracked_projects": config.tracked_projects,
            "progress_remote_dir": config.progress_remote_dir,
            "github_api_url": config.github_api_url,
            "github_token": "set" if config.github_token else "not set",
        },
        "activity": {
            "max_age_days": config.activity_max_age_days,
            "limit": config.activity_limit,
            "utc_offset_hours": config.activity_utc_offset_hours,
        },
        "output": {
            "output_dir": str(config.output_dir),
            "index_file": config.index_file or None,
            "webhook": bool(config.webhook_url),
        },
        "enable_logfire": config.enable_logfire,
    }
    _print_json(status)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Chronicle: activity feeds and progress narratives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # activity command
    activity_parser = subparsers.add_parser("activity", help="Show the activity feed")
    activity_parser.add_argument("--dir", help="Daily log directory (default: config MEMORY_DIR)")
    activity_parser.add_argument("--days", type=int, help="Recency window in days")
    activity_parser.add_argument("--limit", type=int, help="Maximum entries")
    activity_parser.add_argument("--json", action="store_true", help="Print JSON")

    # progress command
    progress_parser = subparsers.add_parser("progress", help="Generate a post from a progress report")
    progress_parser.add_argument("file", help="Report path relative to the progress directory")
    progress_parser.add_argument("--dir", help="Progress directory (default: config PROGRESS_DIR)")
    progress_parser.add_argument(
        "--format",
        choices=[f.value for f in DocumentFormat],
        default=DocumentFormat.FULL.value,
        help="Post format (default: full)",
    )
    progress_parser.add_argument("--save", action="store_true", help="Publish the generated post")
    progress_parser.add_argument("--json", action="store_true", help="Print JSON")

    # list-progress command
    list_parser = subparsers.add_parser("list-progress", help="List local progress reports")
    list_parser.add_argument("--dir", help="Progress directory (default: config PROGRESS_DIR)")
    list_parser.add_argument("--json", action="store_true", help="Print JSON")

    # daily command
    daily_parser = subparsers.add_parser("daily", help="Aggregate tracked projects for one date")
    daily_parser.add_argument("--date", help="Date as YYYY-MM-DD (default: today)")
    daily_parser.add_argument(
        "--local",
        action="append",
        metavar="ID=PATH",
        help="Add a project read from a local directory (repeatable)",
    )
    daily_parser.add_argument("--save", action="store_true", help="Publish the daily update")
    daily_parser.add_argument("--json", action="store_true", help="Print JSON")

    # status command
    subparsers.add_parser("status", help="Show configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = Config.load()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config, verbose=args.verbose)

    if error := config.validate():
        print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    if config.enable_logfire:
        setup_tracing(enabled=True, service_name="chronicle", token=config.logfire_token)

    commands = {
        "activity": cmd_activity,
        "progress": cmd_progress,
        "list-progress": cmd_list_progress,
        "daily": cmd_daily,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except Exception as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
