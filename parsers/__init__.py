"""Deterministic text extraction for logs and progress reports.

classify / passes_gate:
    Keyword taxonomy for activity lines.

extract_activities:
    Ranked activity feed from dated log documents.

parse_progress_report:
    Structured ProgressReport from a progress report markdown document.
"""

from parsers.classifier import classify, passes_gate
from parsers.activity import DEFAULT_ACTIVITY_TZ, extract_activities
from parsers.progress import extract_date_from_filename, parse_progress_report

__all__ = [
    "classify",
    "passes_gate",
    "DEFAULT_ACTIVITY_TZ",
    "extract_activities",
    "extract_date_from_filename",
    "parse_progress_report",
]
