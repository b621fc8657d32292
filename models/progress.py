"""Progress report models.

A ProgressReport is the structured form of one per-project, per-date
markdown progress document. Parsing never fails, so every field is always
present: lists default to empty and optional text defaults to None.
"""

import datetime as dt
from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Issue severity markers, most severe first.

    An issue without a marker carries ``severity=None`` and ranks below LOW.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordinal used to pick the most severe issue (higher = worse)."""
        return _SEVERITY_RANKS[self]


_SEVERITY_RANKS = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


def severity_rank(severity: Severity | None) -> int:
    """Rank a possibly-unset severity; unspecified ranks lowest (0)."""
    return severity.rank if severity is not None else 0


class ProgressIssue(BaseModel):
    """An issue or blocker listed in a progress report.

    Attributes:
        description: Issue headline with any severity marker removed
        severity: Leading severity marker, or None when absent
        symptom: What was observed (``- **Symptom**:`` field)
        root_cause: Why it happened (``- **Root Cause**:`` field)
        fix: How it was resolved (``- **Fix**:`` field)
        learning: Takeaway (``- **Learning**:`` field)
    """

    description: str = Field(description="Issue headline")
    severity: Severity | None = Field(default=None, description="Optional severity marker")
    symptom: str | None = Field(default=None)
    root_cause: str | None = Field(default=None)
    fix: str | None = Field(default=None)
    learning: str | None = Field(default=None)

    @property
    def headline(self) -> str:
        """Description prefixed with the severity token when one is set."""
        if self.severity is None:
            return self.description
        return f"[{self.severity.value}] {self.description}"


class ProgressReport(BaseModel):
    """Structured progress report for one project and date.

    Example:
        >>> report = ProgressReport(
        ...     project_id="chronicle",
        ...     project_name="Chronicle",
        ...     date=dt.date(2025, 11, 20),
        ...     completed_tasks=["Shipped parser"],
        ... )
        >>> report.is_empty
        False
    """

    project_id: str = Field(default="", description="Tracked project identifier")
    project_name: str = Field(default="Unknown Project", description="Display name")
    date: dt.date = Field(description="Report date")
    completed_tasks: list[str] = Field(default_factory=list)
    issues: list[ProgressIssue] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    impact_summary: str | None = Field(default=None)
    source_path: str = Field(default="", description="Where the report was read from")

    @property
    def is_empty(self) -> bool:
        """True when the report carries no tasks, issues, next steps or impact."""
        return not (
            self.completed_tasks
            or self.issues
            or self.next_steps
            or self.impact_summary
        )

    def __str__(self) -> str:
        return (
            f"ProgressReport({self.project_name}, {self.date.isoformat()}, "
            f"tasks={len(self.completed_tasks)} issues={len(self.issues)})"
        )


class ProgressFileInfo(BaseModel):
    """Metadata about a progress report file available for generation."""

    name: str
    path: str = Field(description="Path relative to the progress directory")
    date: dt.date | None = None
    project_name: str = "Unknown Project"
    task_count: int = 0
    issue_count: int = 0
    size: int = 0
