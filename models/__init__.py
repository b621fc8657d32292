"""Pydantic models for the Chronicle pipeline.

This package contains all data models used throughout the pipeline:

RawDocument / ActivityEntry / Category:
    Log documents and the classified activity entries extracted from them.

ProgressReport / ProgressIssue / Severity:
    Structured form of a per-project progress report.

GeneratedDocument / DocumentFormat:
    Publishable narrative rendered from progress reports.

DailyUpdate / AggregateEmpty / ProjectFailure:
    Cross-project aggregation results.

Example:
    >>> from models import Category, ProgressReport
    >>> report = ProgressReport(date=date(2025, 11, 20))
    >>> report.is_empty
    True
"""

from models.activity import ActivityEntry, Category, RawDocument
from models.progress import (
    ProgressFileInfo,
    ProgressIssue,
    ProgressReport,
    Severity,
    severity_rank,
)
from models.narrative import (
    AggregateEmpty,
    DailyUpdate,
    DocumentFormat,
    FailureKind,
    GeneratedDocument,
    ProjectFailure,
    ProjectSection,
)

__all__ = [
    "ActivityEntry",
    "Category",
    "RawDocument",
    "ProgressFileInfo",
    "ProgressIssue",
    "ProgressReport",
    "Severity",
    "severity_rank",
    "AggregateEmpty",
    "DailyUpdate",
    "DocumentFormat",
    "FailureKind",
    "GeneratedDocument",
    "ProjectFailure",
    "ProjectSection",
]
