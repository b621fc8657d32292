"""Activity extraction from dated log documents.

Scans free-form markdown logs (one file per day, e.g. ``2025-11-20.md``) and
turns qualifying lines into classified, timestamped ActivityEntry values.

Line Recognizers (priority order, first match wins):
    1. Time-prefixed: ``14:30 Fixed auth bug`` (optionally after a bullet)
    2. Bullet: ``- Sent follow-up email`` or ``* Sent follow-up email``
    3. Heading: ``## Published launch post``

Timestamp Policy:
    Times are interpreted in a fixed UTC-5 offset with no daylight-saving
    adjustment (DEFAULT_ACTIVITY_TZ). Lines without an explicit time default
    to noon on the file date. Documents without a date in their filename use
    the processing instant.

Error Handling Strategy:
    - Lines that fail the action gate are dropped silently
    - A document that fails during extraction is logged and skipped
    - Stale documents (outside the recency window) are skipped
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable

from models.activity import ActivityEntry, RawDocument
from parsers.classifier import classify, passes_gate

logger = logging.getLogger(__name__)

# Fixed-offset policy for log timestamps (no DST); override via config
DEFAULT_UTC_OFFSET_HOURS = -5
DEFAULT_ACTIVITY_TZ = timezone(timedelta(hours=DEFAULT_UTC_OFFSET_HOURS))

DEFAULT_MAX_AGE_DAYS = 7
DEFAULT_ACTIVITY_LIMIT = 50

# Hour 0-23, minute 00-59; anything else is not a time prefix
_TIME_LINE = re.compile(r"^\s*(?:[-*]\s+)?([01]?\d|2[0-3]):([0-5]\d)\s+(.+)$")
_BULLET_LINE = re.compile(r"^\s*[-*]\s+(.+)$")
_HEADING_LINE = re.compile(r"^\s*#+\s+(.+)$")
_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


@dataclass
class ParsedLine:
    """A recognized candidate line before classification."""

    text: str
    at: time | None = None


def date_from_filename(name: str) -> date | None:
    """Extract an ISO ``YYYY-MM-DD`` date from a filename.

    Args:
        name: Filename such as ``2025-11-20.md`` or ``notes-2025-11-20.md``

    Returns:
        Parsed date, or None if absent or not a real calendar date
    """
    match = _ISO_DATE.search(name or "")
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        logger.debug("Invalid date in filename | name=%s", name)
        return None


def recognize_line(line: str) -> ParsedLine | None:
    """Apply the line recognizers in priority order.

    Args:
        line: One line of a log document

    Returns:
        ParsedLine with the captured text (and time, if time-prefixed),
        or None if no recognizer matched
    """
    match = _TIME_LINE.match(line)
    if match:
        hour, minute, rest = match.groups()
        return ParsedLine(text=rest.strip(), at=time(int(hour), int(minute)))

    match = _BULLET_LINE.match(line)
    if match:
        return ParsedLine(text=match.group(1).strip())

    match = _HEADING_LINE.match(line)
    if match:
        return ParsedLine(text=match.group(1).strip())

    return None


def resolve_timestamp(
    at: time | None,
    file_date: date | None,
    now: datetime,
    tz: tzinfo = DEFAULT_ACTIVITY_TZ,
) -> datetime:
    """Pick the timestamp for a line.

    Args:
        at: Explicit time-of-day from the line, if any
        file_date: Date from the document filename, if any
        now: Current processing instant (fallback)
        tz: Fixed offset used to interpret log times

    Returns:
        Timezone-aware timestamp
    """
    if file_date is None:
        return now
    return datetime.combine(file_date, at or time(12, 0), tzinfo=tz)


def extract_from_document(
    document: RawDocument,
    now: datetime,
    tz: tzinfo = DEFAULT_ACTIVITY_TZ,
) -> list[ActivityEntry]:
    """Extract activity entries from a single document, in line order."""
    file_date = date_from_filename(document.name)
    entries = []

    for line in document.raw_text.splitlines():
        parsed = recognize_line(line)
        if parsed is None or not parsed.text:
            continue
        if not passes_gate(parsed.text):
            continue

        entries.append(ActivityEntry(
            timestamp=resolve_timestamp(parsed.at, file_date, now, tz),
            action=parsed.text,
            category=classify(parsed.text),
            source=document.name,
        ))

    return entries


def extract_activities(
    documents: Iterable[RawDocument],
    *,
    now: datetime | None = None,
    max_age_days: int = DEFAULT_MAX_AGE_DAYS,
    limit: int = DEFAULT_ACTIVITY_LIMIT,
    tz: tzinfo = DEFAULT_ACTIVITY_TZ,
) -> list[ActivityEntry]:
    """Extract a ranked activity feed from log documents.

    Args:
        documents: Log documents to scan
        now: Processing instant (defaults to current UTC time)
        max_age_days: Skip documents modified longer ago than this
        limit: Maximum number of entries returned across all documents
        tz: Fixed offset used to interpret log times

    Returns:
        Entries sorted newest first, at most ``limit`` long

    Example:
        >>> doc = RawDocument(name="2025-11-20.md", raw_text="14:30 Fixed auth bug",
        ...                   modified_at=datetime.now(timezone.utc))
        >>> [e.category.value for e in extract_activities([doc])]
        ['development']
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - timedelta(days=max_age_days)
    entries: list[ActivityEntry] = []
    scanned = 0

    for document in documents:
        if document.modified_at < cutoff:
            logger.debug("Skipping stale document | name=%s", document.name)
            continue
        try:
            entries.extend(extract_from_document(document, now, tz))
            scanned += 1
        except Exception as e:
            logger.warning(
                "Activity extraction failed | name=%s error=%s (%s)",
                document.name, e, type(e).__name__,
            )

    # Stable sort keeps document/line order for equal timestamps
    entries.sort(key=lambda entry: entry.timestamp, reverse=True)
    ranked = entries[:max(limit, 0)]

    logger.info(
        "Activity extracted | documents=%d entries=%d returned=%d",
        scanned, len(entries), len(ranked),
    )
    return ranked
