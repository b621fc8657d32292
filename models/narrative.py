"""Generated narrative models.

Model Hierarchy:
    GeneratedDocument: One publishable post (full or summary) rendered from
        one or more ProgressReports.
    DailyUpdate: Cross-project update for a single date; one section per
        project that had something to report.
    AggregateEmpty: Returned instead of a DailyUpdate when no project had
        anything to report. This is a normal outcome, not an error.
    ProjectFailure: A tracked project whose report could not be fetched.
"""

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from models.progress import ProgressReport


class DocumentFormat(str, Enum):
    """Output format for a generated document."""

    FULL = "full"
    SUMMARY = "summary"


class GeneratedDocument(BaseModel):
    """A publishable markdown document.

    Generation is a pure function of its source reports, so two documents
    generated from equal reports compare equal field by field.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Post title")
    body: str = Field(description="Markdown body")
    excerpt: str = Field(default="", description="Short teaser (<= 160 chars)")
    format: DocumentFormat = Field(default=DocumentFormat.FULL)
    source_reports: list[ProgressReport] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    read_time: int = Field(default=1, ge=1, description="Estimated minutes to read")

    def __str__(self) -> str:
        return f"GeneratedDocument({self.format.value}, '{self.title[:50]}')"


class FailureKind(str, Enum):
    """Why a tracked project contributed no report."""

    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"


class ProjectFailure(BaseModel):
    """A per-project fetch failure collected during aggregation."""

    project_id: str
    kind: FailureKind
    message: str = ""


class ProjectSection(BaseModel):
    """One project's contribution to a daily update."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    document: GeneratedDocument


class DailyUpdate(BaseModel):
    """Cross-project update for one date.

    Attributes:
        date: Date the update covers
        sections: Per-project documents, in input order
        aggregate_note: Short note describing the aggregation outcome
        failures: Projects that could not be fetched
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    sections: list[ProjectSection] = Field(default_factory=list)
    aggregate_note: str | None = None
    failures: list[ProjectFailure] = Field(default_factory=list)

    @property
    def project_ids(self) -> list[str]:
        return [section.project_id for section in self.sections]


class AggregateEmpty(BaseModel):
    """Nothing to report across all tracked projects for a date."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    message: str = "Nothing to report across tracked projects."
    failures: list[ProjectFailure] = Field(default_factory=list)
