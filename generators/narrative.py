"""Narrative generation from progress reports.

Turns a ProgressReport into a publishable GeneratedDocument in one of two
formats:

    FULL: Build-in-public post with fixed section order
          Title -> Completed Tasks -> Challenges -> Next Up -> Impact
    SUMMARY: One paragraph with counts, the most severe issue and the
             impact summary

Generation is pure: no clocks, no randomness, no I/O. Rendering the same
report twice yields byte-identical documents.
"""

import logging

from generators.text import (
    first_sentence,
    long_date,
    plural,
    read_time,
    single_line,
    slugify,
    truncate,
)
from models.narrative import DocumentFormat, GeneratedDocument
from models.progress import ProgressIssue, ProgressReport, severity_rank

logger = logging.getLogger(__name__)

STEADY_PROGRESS_SENTENCE = "Steady progress, no major changes."

BASE_TAGS = ("progress-report", "build-in-public")

_INTRO = "*A transparent look at what got built, what broke, and what was learned while working on {name}.*"
_CLOSING = "*Building in public means sharing the real journey, wins and losses included. Follow along for more updates.*"

_ISSUE_DETAILS = (
    ("symptom", "The Problem"),
    ("root_cause", "Root Cause"),
    ("fix", "Solution"),
    ("learning", "Key Takeaway"),
)


def full_title(report: ProgressReport) -> str:
    return f"{report.project_name}: Progress Update - {long_date(report.date)}"


def summary_title(report: ProgressReport) -> str:
    return f"Quick Update: {report.project_name} - {long_date(report.date)}"


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items]


def _issue_lines(issue: ProgressIssue) -> list[str]:
    lines = [f"- {issue.headline}"]
    for attr, label in _ISSUE_DETAILS:
        value = getattr(issue, attr)
        if value:
            lines.append(f"  - **{label}:** {value}")
    return lines


def render_report_sections(report: ProgressReport) -> list[str]:
    """Render the body sections of a report (no title, intro or closing).

    Empty sections are omitted. Each returned block is a markdown section
    starting with a level-2 heading.
    """
    sections = []

    if report.completed_tasks:
        sections.append("\n".join(["## Completed Tasks", "", *_bullets(report.completed_tasks)]))

    if report.issues:
        lines = ["## Challenges", ""]
        for issue in report.issues:
            lines.extend(_issue_lines(issue))
        sections.append("\n".join(lines))

    if report.next_steps:
        sections.append("\n".join(["## Next Up", "", *_bullets(report.next_steps)]))

    if report.impact_summary:
        sections.append("\n".join(["## Impact", "", report.impact_summary]))

    return sections


def top_issue(issues: list[ProgressIssue]) -> ProgressIssue | None:
    """Most severe issue; the earliest one wins ties."""
    if not issues:
        return None
    return max(issues, key=lambda issue: severity_rank(issue.severity))


def build_excerpt(report: ProgressReport) -> str:
    """Short teaser from task/issue counts and the impact's first sentence."""
    parts = []
    tasks = len(report.completed_tasks)
    issues = len(report.issues)

    if tasks:
        parts.append(f"Shipped {plural(tasks, 'update')}")
    if issues:
        verb = "tackled" if parts else "Tackled"
        parts.append(f"{verb} {plural(issues, 'challenge')}")

    excerpt = " and ".join(parts)
    if report.impact_summary:
        sentence = first_sentence(single_line(report.impact_summary))
        if sentence:
            excerpt = f"{excerpt}. {sentence}" if excerpt else sentence

    if not excerpt:
        excerpt = f"Progress update for {report.project_name}"
    return truncate(excerpt)


def build_tags(report: ProgressReport) -> list[str]:
    tags = list(BASE_TAGS)
    project_tag = slugify(report.project_name)
    if project_tag and project_tag not in tags:
        tags.append(project_tag)
    if report.issues:
        tags.append("lessons-learned")
    return tags


def generate_full(report: ProgressReport) -> GeneratedDocument:
    """Render a full build-in-public post.

    Args:
        report: Parsed progress report

    Returns:
        GeneratedDocument with format FULL
    """
    title = full_title(report)
    blocks = [
        f"# {title}",
        _INTRO.format(name=report.project_name),
        *render_report_sections(report),
        "---",
        _CLOSING,
    ]
    body = "\n\n".join(blocks) + "\n"

    return GeneratedDocument(
        title=title,
        body=body,
        excerpt=build_excerpt(report),
        format=DocumentFormat.FULL,
        source_reports=[report],
        tags=build_tags(report),
        read_time=read_time(body),
    )


def summary_paragraph(report: ProgressReport) -> str:
    """Build the single summary paragraph for a report."""
    tasks = len(report.completed_tasks)
    issues = len(report.issues)
    sentences = []

    if tasks == 0 and issues == 0:
        sentences.append(STEADY_PROGRESS_SENTENCE)
    else:
        sentences.append(f"{plural(tasks, 'task')} completed, {plural(issues, 'issue')}.")
        worst = top_issue(report.issues)
        if worst is not None:
            sentences.append(f"Top issue: {worst.headline.rstrip('.')}.")

    if report.impact_summary:
        sentences.append(f"Impact: {single_line(report.impact_summary)}")

    return " ".join(sentences)


def generate_summary(report: ProgressReport) -> GeneratedDocument:
    """Render a one-paragraph quick update.

    The body is never empty: a report with no tasks and no issues yields
    STEADY_PROGRESS_SENTENCE.
    """
    body = summary_paragraph(report)
    return GeneratedDocument(
        title=summary_title(report),
        body=body,
        excerpt=build_excerpt(report),
        format=DocumentFormat.SUMMARY,
        source_reports=[report],
        tags=[*build_tags(report), "quick-update"],
        read_time=read_time(body),
    )


def generate(report: ProgressReport, format: DocumentFormat = DocumentFormat.FULL) -> GeneratedDocument:
    """Render a report in the requested format."""
    if DocumentFormat(format) is DocumentFormat.SUMMARY:
        document = generate_summary(report)
    else:
        document = generate_full(report)
    logger.debug("Document generated | %s", document)
    return document
