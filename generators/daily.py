"""Cross-project daily aggregation.

Combines progress reports from many tracked projects for one date into a
DailyUpdate. Projects whose report is completely empty contribute nothing.
When no project contributes, AggregateEmpty is returned instead: a quiet
day is a normal outcome and callers render it as such.

Fetch failures are collected upstream (see pipeline.py) and passed in so
the aggregate note can mention them. They never turn the whole update
into a failure.
"""

import logging
import re
from datetime import date
from typing import Iterable, Sequence

from generators.narrative import generate_full, render_report_sections
from generators.text import medium_date, plural, read_time, slugify
from models.narrative import (
    AggregateEmpty,
    DailyUpdate,
    DocumentFormat,
    FailureKind,
    GeneratedDocument,
    ProjectFailure,
    ProjectSection,
)
from models.progress import ProgressReport

logger = logging.getLogger(__name__)

DAILY_TAGS = ("daily-update", "build-in-public")

_FAILURE_LABELS = {
    FailureKind.NOT_FOUND: "not found",
    FailureKind.ACCESS_DENIED: "access denied",
}

_FOOTER = "_This update was generated from per-project progress reports._"


def _aggregate_note(sections: int, skipped: int, failures: Sequence[ProjectFailure]) -> str:
    noun = "project" if sections == 1 else "projects"
    parts = [f"Progress across {sections} active {noun}."]
    if skipped:
        parts.append(f"{plural(skipped, 'project')} had nothing to report.")
    if failures:
        listed = ", ".join(f"{f.project_id} ({_FAILURE_LABELS[f.kind]})" for f in failures)
        parts.append(f"Could not fetch: {listed}.")
    return " ".join(parts)


def aggregate(
    day: date,
    per_project_reports: Iterable[tuple[str, ProgressReport]],
    *,
    failures: Sequence[ProjectFailure] = (),
) -> DailyUpdate | AggregateEmpty:
    """Aggregate per-project reports for one date.

    Args:
        day: Date the update covers
        per_project_reports: (project_id, report) pairs in display order
        failures: Projects whose report could not be fetched

    Returns:
        DailyUpdate with one FULL section per non-empty report, or
        AggregateEmpty if no report had content
    """
    sections = []
    skipped = 0

    for project_id, report in per_project_reports:
        if report.is_empty:
            skipped += 1
            logger.debug("Skipping empty report | project=%s date=%s", project_id, day)
            continue
        sections.append(ProjectSection(project_id=project_id, document=generate_full(report)))

    if not sections:
        logger.info(
            "Daily aggregation empty | date=%s skipped=%d failures=%d",
            day, skipped, len(failures),
        )
        return AggregateEmpty(date=day, failures=list(failures))

    logger.info(
        "Daily aggregation complete | date=%s sections=%d skipped=%d failures=%d",
        day, len(sections), skipped, len(failures),
    )
    return DailyUpdate(
        date=day,
        sections=sections,
        aggregate_note=_aggregate_note(len(sections), skipped, failures),
        failures=list(failures),
    )


def _demote(markdown: str) -> str:
    """Push every heading one level down (``## x`` -> ``### x``)."""
    return re.sub(r"^(#{1,5}) ", r"#\1 ", markdown, flags=re.MULTILINE)


def render_daily_update(update: DailyUpdate) -> GeneratedDocument:
    """Combine a DailyUpdate into a single publishable post."""
    title = f"Daily Update: {medium_date(update.date)}"
    reports = [report for section in update.sections for report in section.document.source_reports]

    blocks = [f"# {title}"]
    if update.aggregate_note:
        blocks.append(update.aggregate_note)

    for section in update.sections:
        for report in section.document.source_reports:
            blocks.append(f"## {report.project_name}")
            blocks.extend(_demote(block) for block in render_report_sections(report))
        blocks.append("---")

    blocks.append(_FOOTER)
    body = "\n\n".join(blocks) + "\n"

    total_tasks = sum(len(report.completed_tasks) for report in reports)
    count = len(update.sections)
    excerpt = (
        f"Completed {plural(total_tasks, 'task')} across {plural(count, 'project')}. "
        "Building in public, one commit at a time."
    )

    tags = list(DAILY_TAGS)
    if len(reports) == 1:
        project_tag = slugify(reports[0].project_name)
        if project_tag:
            tags.append(project_tag)

    return GeneratedDocument(
        title=title,
        body=body,
        excerpt=excerpt,
        format=DocumentFormat.FULL,
        source_reports=reports,
        tags=tags,
        read_time=read_time(body),
    )
