"""Pipeline orchestration for activity feeds and progress narratives.

This module wires sources, parsers and generators together:

Activity Feed:
    1. LOAD: Read recent dated logs from the memory directory
    2. EXTRACT: Recognize, gate and classify log lines
    3. RANK: Newest first, capped at ACTIVITY_LIMIT

Progress Post:
    1. READ: Load one file from the local progress directory
    2. PARSE: Build a ProgressReport (filename date as fallback)
    3. GENERATE: Render a full or summary GeneratedDocument

Daily Update:
    1. FETCH: Concurrently pull each tracked project's report for the date
    2. COLLECT: Turn per-project fetch errors into ProjectFailure records
    3. AGGREGATE: Combine surviving reports into a DailyUpdate, or
       AggregateEmpty when nobody had anything to report

One project failing never affects the others, and nothing is retried.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Sequence

import aiohttp

from config import Config
from errors import AccessDenied, DocumentNotFound
from generators.daily import aggregate
from generators.narrative import generate
from models.activity import ActivityEntry
from models.narrative import (
    AggregateEmpty,
    DailyUpdate,
    DocumentFormat,
    FailureKind,
    GeneratedDocument,
    ProjectFailure,
)
from models.progress import ProgressFileInfo, ProgressReport
from observability.logging import clear_context, set_project_context, set_run_context
from observability.tracing import trace_operation
from parsers.activity import extract_activities
from parsers.progress import extract_date_from_filename, parse_progress_report
from sources.base import DirectoryEntry, DocumentFetcher, LogSource
from sources.github import GitHubFetcher, create_ssl_context, parse_github_url
from sources.local import LocalDocumentFetcher, ProgressDirectory

logger = logging.getLogger(__name__)


@dataclass
class DailyRunStats:
    """Counts from a single daily-update run.

    Attributes:
        projects: Tracked projects requested
        fetched: Reports fetched and parsed
        failed: Projects that could not be fetched
        sections: Sections in the resulting update
        duration: Total run time in seconds
    """

    projects: int = 0
    fetched: int = 0
    failed: int = 0
    sections: int = 0
    duration: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d["duration"] = round(d["duration"], 2)
        return d


# =============================================================================
# Activity feed
# =============================================================================


def build_activity_feed(
    source: LogSource,
    config: Config,
    now: datetime | None = None,
) -> list[ActivityEntry]:
    """Build the ranked activity feed from a log source."""
    now = now or datetime.now(timezone.utc)
    with trace_operation("activity_feed", {"max_age_days": config.activity_max_age_days}) as attrs:
        documents = source.list_recent_documents(config.activity_max_age_days)
        entries = extract_activities(
            documents,
            now=now,
            max_age_days=config.activity_max_age_days,
            limit=config.activity_limit,
            tz=config.activity_tz,
        )
        attrs["documents"] = len(documents)
        attrs["entries"] = len(entries)
    return entries


# =============================================================================
# Local progress files
# =============================================================================


def list_progress_files(progress_dir: ProgressDirectory) -> list[ProgressFileInfo]:
    """List local progress files, newest report date first."""
    files = progress_dir.list_files()
    logger.debug("Progress files listed | dir=%s count=%d", progress_dir.root, len(files))
    return files


def generate_from_progress_file(
    progress_dir: ProgressDirectory,
    relative_path: str,
    format: DocumentFormat = DocumentFormat.FULL,
    today: date | None = None,
) -> GeneratedDocument:
    """Generate a post from one local progress file.

    Raises:
        ValueError: Path rejected (traversal, absolute, not markdown)
        DocumentNotFound: File missing or unreadable
    """
    document = progress_dir.read(relative_path)
    report = parse_progress_report(
        document.raw_text,
        extract_date_from_filename(document.name),
        source_path=relative_path,
        filename=document.name,
        today=today,
    )
    generated = generate(report, format)
    logger.info(
        "Post generated | file=%s format=%s tasks=%d issues=%d",
        relative_path, format.value, len(report.completed_tasks), len(report.issues),
    )
    return generated


# =============================================================================
# Daily update across tracked projects
# =============================================================================


def select_report_entry(entries: Sequence[DirectoryEntry], day: date) -> DirectoryEntry | None:
    """Pick the markdown report for ``day`` from a directory listing.

    Matches files whose name contains the ISO date; the first by name wins.
    """
    stamp = day.isoformat()
    candidates = [
        entry for entry in entries
        if entry.kind == "file" and entry.name.lower().endswith(".md") and stamp in entry.name
    ]
    return min(candidates, key=lambda entry: entry.name, default=None)


async def fetch_project_report(
    project_id: str,
    fetcher: DocumentFetcher,
    day: date,
    remote_dir: str = "progress",
    today: date | None = None,
) -> ProgressReport:
    """Fetch and parse one project's progress report for ``day``.

    Raises:
        DocumentNotFound: No report for the date, or transport failure
        AccessDenied: Fetcher lacks permission
    """
    set_project_context(project_id)
    with trace_operation("fetch_project_report", {"project": project_id, "date": day.isoformat()}) as attrs:
        entries = await fetcher.list_directory(remote_dir)
        entry = select_report_entry(entries, day)
        if entry is None:
            raise DocumentNotFound(f"No progress report for {day.isoformat()} in {remote_dir}/", path=remote_dir)

        text = await fetcher.fetch_file(entry.path)
        report = parse_progress_report(
            text,
            extract_date_from_filename(entry.name),
            project_id=project_id,
            source_path=entry.path,
            filename=entry.name,
            today=today,
        )
        attrs["path"] = entry.path
        attrs["tasks"] = len(report.completed_tasks)
        attrs["issues"] = len(report.issues)
    logger.debug(
        "Project report fetched | path=%s tasks=%d issues=%d",
        entry.path, len(report.completed_tasks), len(report.issues),
    )
    return report


def failure_from_exception(project_id: str, error: BaseException) -> ProjectFailure:
    """Map a per-project exception onto a ProjectFailure record."""
    if isinstance(error, AccessDenied):
        kind = FailureKind.ACCESS_DENIED
    else:
        kind = FailureKind.NOT_FOUND
    return ProjectFailure(project_id=project_id, kind=kind, message=str(error) or type(error).__name__)


async def generate_daily_update(
    projects: Sequence[tuple[str, DocumentFetcher]],
    day: date,
    *,
    remote_dir: str = "progress",
    today: date | None = None,
    stats: DailyRunStats | None = None,
) -> DailyUpdate | AggregateEmpty:
    """Fetch every project's report concurrently and aggregate them.

    Args:
        projects: (project_id, fetcher) pairs in display order
        day: Date the update covers
        remote_dir: Directory holding progress reports in each project
        today: Processing date used for report date resolution
        stats: Optional stats object filled in place

    Returns:
        DailyUpdate, or AggregateEmpty if no project had content
    """
    stats = stats if stats is not None else DailyRunStats()
    stats.projects = len(projects)

    with trace_operation("daily_update", {"projects": len(projects), "date": day.isoformat()}) as attrs:
        tasks = [
            fetch_project_report(project_id, fetcher, day, remote_dir, today)
            for project_id, fetcher in projects
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        reports: list[tuple[str, ProgressReport]] = []
        failures: list[ProjectFailure] = []

        for (project_id, _), result in zip(projects, results):
            if isinstance(result, (DocumentNotFound, AccessDenied)):
                logger.warning(
                    "Project fetch failed | project=%s error=%s (%s)",
                    project_id, result, type(result).__name__,
                )
                failures.append(failure_from_exception(project_id, result))
            elif isinstance(result, Exception):
                logger.error(
                    "Project fetch error | project=%s error=%s (%s)",
                    project_id, result, type(result).__name__, exc_info=result,
                )
                failures.append(failure_from_exception(project_id, result))
            elif isinstance(result, BaseException):
                raise result
            else:
                reports.append((project_id, result))

        stats.fetched = len(reports)
        stats.failed = len(failures)

        outcome = aggregate(day, reports, failures=failures)
        stats.sections = len(outcome.sections) if isinstance(outcome, DailyUpdate) else 0
        attrs.update(stats.to_dict())

    return outcome


def build_project_fetchers(
    config: Config,
    session: aiohttp.ClientSession,
) -> list[tuple[str, GitHubFetcher]]:
    """Create one GitHubFetcher per tracked project sharing ``session``.

    Unrecognized project URLs are logged and skipped.
    """
    fetchers = []
    for url in config.tracked_projects:
        parsed = parse_github_url(url)
        if parsed is None:
            logger.warning("Invalid tracked project URL skipped | url=%s", url)
            continue
        owner, repo = parsed
        fetchers.append((
            f"{owner}/{repo}",
            GitHubFetcher(
                owner,
                repo,
                config.github_token,
                api_url=config.github_api_url,
                timeout=config.request_timeout_seconds,
                session=session,
            ),
        ))
    return fetchers


def local_project_fetchers(local_projects: dict[str, Path]) -> list[tuple[str, LocalDocumentFetcher]]:
    """Create fetchers for projects that live on the local filesystem."""
    return [(project_id, LocalDocumentFetcher(root)) for project_id, root in local_projects.items()]


async def run_daily(
    config: Config,
    day: date | None = None,
    local_projects: dict[str, Path] | None = None,
) -> tuple[DailyUpdate | AggregateEmpty, DailyRunStats]:
    """Run one daily-update aggregation for the configured projects.

    Remote projects come from TRACKED_PROJECTS; ``local_projects`` maps
    extra project IDs to local directories and is appended after them.
    """
    run_id = uuid.uuid4().hex[:8]
    set_run_context(run_id)
    start = time.time()
    day = day or date.today()
    stats = DailyRunStats()

    try:
        connector = aiohttp.TCPConnector(limit=config.max_workers, ssl=create_ssl_context())
        async with aiohttp.ClientSession(connector=connector) as session:
            projects: list[tuple[str, DocumentFetcher]] = [*build_project_fetchers(config, session)]
            projects.extend(local_project_fetchers(local_projects or {}))
            logger.info("Daily update started | date=%s projects=%d", day, len(projects))

            outcome = await generate_daily_update(
                projects,
                day,
                remote_dir=config.progress_remote_dir,
                stats=stats,
            )

        stats.duration = time.time() - start
        logger.info(
            "Daily update complete | fetched=%d failed=%d sections=%d duration=%.1fs",
            stats.fetched, stats.failed, stats.sections, stats.duration,
        )
        return outcome, stats
    finally:
        clear_context()
