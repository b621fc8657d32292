"""Progress report parser.

Parses per-project markdown progress reports into ProgressReport records.
Reports are written by hand, so every rule here is a tolerant heuristic:

Expected shape (all parts optional):

    # Project Name - 2025-11-20 Progress Report

    ## Completed Today
    - [x] Shipped the parser

    ## Issues & Learnings
    - [high] Deploy pipeline flaky
    ### Issue: Login loop
    - **Symptom**: Users bounced back to /login
    - **Fix**: Cleared stale cookie

    ## Impact Summary
    Free-text paragraph.

    ## Next Steps
    - [ ] Add caching headers

Section Matching:
    Sections are located by heading synonyms (see SECTION_SYNONYMS), not by
    fixed literals. A section runs until the next heading of the same or a
    higher level, so ``### Issue:`` sub-blocks stay inside their section.

Date Resolution:
    1. Date in the title line or a ``Date:`` field
    2. Date encoded in the filename (also wins when the content date is
       missing or equals today, which usually means a template default)
    3. Today

Malformed input never raises. Missing sections produce empty lists/None
and unparseable dates are treated as absent.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date

from models.progress import ProgressIssue, ProgressReport, Severity

logger = logging.getLogger(__name__)

UNKNOWN_PROJECT = "Unknown Project"

COMPLETED = "completed"
ISSUES = "issues"
NEXT_STEPS = "next_steps"
IMPACT = "impact"

# Checked in order; the first kind with a matching synonym wins
SECTION_SYNONYMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (COMPLETED, (
        r"completed?", r"done", r"accomplish(?:ed|ments?)", r"shipped",
        r"finished", r"wins?",
    )),
    (ISSUES, (
        r"issues?", r"blockers?", r"problems?", r"challenges?", r"risks?",
    )),
    (NEXT_STEPS, (
        r"next", r"upcoming", r"todo", r"to do", r"coming up", r"tomorrow",
        r"planned",
    )),
    (IMPACT, (
        r"impact", r"outcomes?", r"results?",
    )),
)

_SECTION_PATTERNS = [
    (kind, re.compile(r"\b(?:" + "|".join(words) + r")\b"))
    for kind, words in SECTION_SYNONYMS
]

SEVERITY_TOKENS: dict[str, Severity] = {
    "critical": Severity.CRITICAL,
    "high": Severity.HIGH,
    "medium": Severity.MEDIUM,
    "low": Severity.LOW,
    "p0": Severity.CRITICAL,
    "p1": Severity.HIGH,
    "p2": Severity.MEDIUM,
    "p3": Severity.LOW,
}

_HEADING = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
_TITLE = re.compile(r"^#\s+(.+?)\s+-\s+(\d{4}-\d{2}-\d{2})\s+Progress\s+Report", re.IGNORECASE | re.MULTILINE)
_H1 = re.compile(r"^#\s+(.+?)(?:\s+-\s.*)?\s*$", re.MULTILINE)
_DATE_FIELD = re.compile(
    r"^\s*(?:[-*]\s+)?(?:\*\*)?(?:report\s+)?date(?:\*\*)?\s*:\s*(?:\*\*)?\s*(\d{4}-\d{2}-\d{2})",
    re.IGNORECASE | re.MULTILINE,
)
_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_FILENAME_PROJECT = re.compile(r"^(.+?)-\d{4}-\d{2}-\d{2}\.md$", re.IGNORECASE)

_LIST_ITEM = re.compile(r"^(\s*)(?:[-*+]|\d+[.)])\s+(.+)$")
_CHECKBOX = re.compile(r"^\[([ xX])\]\s*(.*)$")
_ISSUE_FIELD = re.compile(
    r"^\s*[-*]\s*\*\*(symptom|root\s*cause|fix|learning)\s*:?\*\*\s*:?\s*(.+)$",
    re.IGNORECASE,
)
_ISSUE_HEADING_PREFIX = re.compile(r"^issue\s*:\s*", re.IGNORECASE)

_SEVERITY_BRACKETED = re.compile(r"^[\[(]\s*([A-Za-z0-9]+)\s*[\])]\s*[:\-]?\s*(.*)$")
_SEVERITY_BOLD = re.compile(r"^\*\*([A-Za-z0-9]+)\s*:?\*\*\s*:?\s*(.*)$")
_SEVERITY_PREFIXED = re.compile(r"^([A-Za-z0-9]+)\s*(?::|\s-)\s*(.*)$")

_FIELD_NAMES = {
    "symptom": "symptom",
    "rootcause": "root_cause",
    "fix": "fix",
    "learning": "learning",
}


@dataclass
class _Section:
    kind: str
    level: int
    lines: list[str] = field(default_factory=list)


def _parse_iso(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD``; invalid calendar dates are treated as absent."""
    if not value:
        return None
    match = _ISO_DATE.search(value)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        logger.debug("Unparseable report date | value=%s", value)
        return None


def extract_date_from_filename(filename: str) -> date | None:
    """Extract a date from a progress report filename.

    Accepts ``YYYY-MM-DD.md`` and ``project-YYYY-MM-DD.md``.
    """
    return _parse_iso(filename)


def extract_content_date(content: str) -> date | None:
    """Find the report date in the title line or a ``Date:`` field."""
    match = _TITLE.search(content)
    if match:
        parsed = _parse_iso(match.group(2))
        if parsed:
            return parsed
    match = _DATE_FIELD.search(content)
    if match:
        return _parse_iso(match.group(1))
    return None


def resolve_report_date(
    content_date: date | None,
    filename_date: date | None,
    today: date,
) -> date:
    """Apply the date priority rules.

    The content date wins unless it is missing or equals today while the
    filename encodes a date; a "today" content date is usually a template
    default and would otherwise mask the real report date.

    Args:
        content_date: Date found inside the document
        filename_date: Date encoded in the filename
        today: Current processing date

    Returns:
        Resolved report date
    """
    if content_date is not None and (content_date != today or filename_date is None):
        return content_date
    if filename_date is not None:
        return filename_date
    return today


def extract_project_name(content: str, filename: str = "") -> str:
    """Get the project name from the title line, falling back to the filename."""
    match = _TITLE.search(content)
    if match:
        return match.group(1).strip()
    match = _H1.search(content)
    if match and match.group(1).strip():
        return match.group(1).strip()

    match = _FILENAME_PROJECT.match(filename.rsplit("/", 1)[-1]) if filename else None
    if match:
        return " ".join(part.capitalize() for part in re.split(r"[-_]+", match.group(1)) if part)
    return UNKNOWN_PROJECT


def section_kind(heading: str) -> str | None:
    """Map heading text to a section kind using the synonym sets."""
    normalized = re.sub(r"[^a-z0-9\s]", " ", heading.lower())
    normalized = re.sub(r"\s+", " ", normalized).strip()
    for kind, pattern in _SECTION_PATTERNS:
        if pattern.search(normalized):
            return kind
    return None


def split_sections(content: str) -> dict[str, list[_Section]]:
    """Group document lines under recognized section headings.

    Headings deeper than the open section stay inside it as ordinary lines.
    Level-1 headings (document titles) never open a section.
    """
    sections: dict[str, list[_Section]] = {}
    current: _Section | None = None

    for line in content.splitlines():
        match = _HEADING.match(line)
        if match:
            level = len(match.group(1))
            if current is not None and level > current.level:
                current.lines.append(line)
                continue
            current = None
            kind = section_kind(match.group(2)) if level > 1 else None
            if kind:
                current = _Section(kind=kind, level=level)
                sections.setdefault(kind, []).append(current)
            continue

        if current is not None:
            current.lines.append(line)

    return sections


def _list_items(lines: list[str]) -> list[tuple[str, str | None]]:
    """Return (text, checkbox state) for every top-level list item; state is 'x', ' ' or None.

    Items indented deeper than the first item are details of their parent.
    """
    items = []
    base_indent: int | None = None
    for line in lines:
        match = _LIST_ITEM.match(line)
        if not match:
            continue
        indent = len(match.group(1).expandtabs(4))
        if base_indent is None:
            base_indent = indent
        elif indent > base_indent:
            continue
        text = match.group(2).strip()
        state = None
        box = _CHECKBOX.match(text)
        if box:
            state = box.group(1).lower()
            text = box.group(2).strip()
        if text:
            items.append((text, state))
    return items


def split_severity(text: str) -> tuple[Severity | None, str]:
    """Split a leading severity marker off an issue description.

    Recognized markers (case-insensitive): ``[high] x``, ``(high) x``,
    ``high: x``, ``high - x``, ``**high**: x``, and ``P0``-``P3`` in the same
    positions. Text without a recognized marker is returned unchanged.

    Returns:
        (severity or None, description without the marker)
    """
    for pattern in (_SEVERITY_BRACKETED, _SEVERITY_BOLD, _SEVERITY_PREFIXED):
        match = pattern.match(text)
        if not match:
            continue
        severity = SEVERITY_TOKENS.get(match.group(1).lower())
        rest = match.group(2).strip()
        if severity is not None and rest:
            return severity, rest
    return None, text


def _new_issue(text: str) -> dict:
    severity, description = split_severity(text.strip())
    return {"description": description, "severity": severity}


def parse_completed(sections: dict[str, list[_Section]]) -> list[str]:
    tasks = []
    for section in sections.get(COMPLETED, []):
        tasks.extend(text for text, state in _list_items(section.lines) if state != " ")
    return tasks


def parse_next_steps(sections: dict[str, list[_Section]]) -> list[str]:
    steps = []
    for section in sections.get(NEXT_STEPS, []):
        steps.extend(text for text, state in _list_items(section.lines) if state != "x")
    return steps


def parse_impact(sections: dict[str, list[_Section]]) -> str | None:
    blocks = ["\n".join(section.lines).strip() for section in sections.get(IMPACT, [])]
    summary = "\n\n".join(block for block in blocks if block)
    return summary or None


def parse_issues(sections: dict[str, list[_Section]]) -> list[ProgressIssue]:
    """Extract issues from bullet items and ``### Issue:`` sub-blocks.

    Field bullets (``- **Fix**: ...``) attach to the most recent issue.
    Indented bullets under an issue are treated as detail and skipped.
    Inside an ``Issue:`` block every other line is detail. Any other
    sub-heading closes the block, and its content is not an issue.
    """
    issues: list[dict] = []

    for section in sections.get(ISSUES, []):
        current: dict | None = None
        in_block = False
        skipping = False
        for line in section.lines:
            heading = _HEADING.match(line)
            if heading:
                title = heading.group(2).strip()
                if _ISSUE_HEADING_PREFIX.match(title):
                    title = _ISSUE_HEADING_PREFIX.sub("", title).strip()
                    current = _new_issue(title or "Untitled Issue")
                    issues.append(current)
                    in_block, skipping = True, False
                else:
                    current = None
                    in_block, skipping = False, True
                continue
            if skipping:
                continue

            field_match = _ISSUE_FIELD.match(line)
            if field_match:
                name = _FIELD_NAMES[re.sub(r"\s+", "", field_match.group(1).lower())]
                if current is not None:
                    current[name] = field_match.group(2).strip()
                continue
            if in_block:
                continue

            item = _LIST_ITEM.match(line)
            if not item:
                continue
            if item.group(1) and current is not None:
                continue
            text = item.group(2).strip()
            box = _CHECKBOX.match(text)
            if box:
                text = box.group(2).strip()
            if text:
                current = _new_issue(text)
                issues.append(current)

    return [ProgressIssue(**issue) for issue in issues]


def parse_progress_report(
    raw_text: str,
    fallback_filename_date: date | None = None,
    *,
    project_id: str = "",
    source_path: str = "",
    filename: str = "",
    today: date | None = None,
) -> ProgressReport:
    """Parse a progress report document.

    Never raises: any unexpected failure degrades to an empty report dated
    by the normal resolution rules.

    Args:
        raw_text: Markdown content of the report
        fallback_filename_date: Date encoded in the report filename, if any
        project_id: Tracked project identifier to stamp on the result
        source_path: Where the document was read from
        filename: Report filename, used as a project name fallback
        today: Processing date (defaults to date.today())

    Returns:
        Fully populated ProgressReport

    Example:
        >>> report = parse_progress_report("## Done\\n- Shipped v1", date(2025, 11, 20))
        >>> report.completed_tasks, report.date
        (['Shipped v1'], datetime.date(2025, 11, 20))
    """
    today = today or date.today()
    content = raw_text or ""
    filename = filename or source_path

    try:
        content_date = extract_content_date(content)
        sections = split_sections(content)
        report = ProgressReport(
            project_id=project_id,
            project_name=extract_project_name(content, filename),
            date=resolve_report_date(content_date, fallback_filename_date, today),
            completed_tasks=parse_completed(sections),
            issues=parse_issues(sections),
            next_steps=parse_next_steps(sections),
            impact_summary=parse_impact(sections),
            source_path=source_path,
        )
    except Exception as e:
        logger.warning(
            "Progress report parse degraded | source=%s error=%s (%s)",
            source_path or "-", e, type(e).__name__, exc_info=True,
        )
        return ProgressReport(
            project_id=project_id,
            date=resolve_report_date(None, fallback_filename_date, today),
            source_path=source_path,
        )

    logger.debug(
        "Progress report parsed | project=%s date=%s tasks=%d issues=%d next=%d",
        report.project_name, report.date, len(report.completed_tasks),
        len(report.issues), len(report.next_steps),
    )
    return report
