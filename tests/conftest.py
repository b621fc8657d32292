"""Shared fixtures for Chronicle tests."""

from datetime import date
from pathlib import PurePosixPath

import pytest

from errors import DocumentNotFound, FetchError
from models.progress import ProgressIssue, ProgressReport, Severity
from sources.base import DirectoryEntry

REPORT_DAY = date(2025, 11, 20)

SAMPLE_REPORT = """\
# Chronicle - 2025-11-20 Progress Report

## Completed Today
- [x] Shipped the progress parser
- Added severity markers
- [ ] Not done yet

## Issues & Learnings
- [high] Deploy pipeline flaky
### Issue: Login loop
- **Symptom**: Users bounced back to /login
- **Root Cause**: Stale session cookie
- **Fix**: Cleared cookie on logout
- **Learning**: Test the logout path

## Impact Summary
Parser now handles real reports. Posts take seconds.

## Next Steps
- [ ] Add caching headers
- [x] Already done
- Write docs
"""


class FakeFetcher:
    """In-memory DocumentFetcher keyed by path."""

    def __init__(self, files: dict[str, str] | None = None, error: FetchError | Exception | None = None):
        self.files = files or {}
        self.error = error
        self.requests: list[str] = []

    async def fetch_file(self, path: str) -> str:
        self.requests.append(path)
        if self.error is not None:
            raise self.error
        if path not in self.files:
            raise DocumentNotFound(f"missing {path}", path=path, status=404)
        return self.files[path]

    async def list_directory(self, path: str) -> list[DirectoryEntry]:
        self.requests.append(path)
        if self.error is not None:
            raise self.error
        prefix = path.strip("/")
        return [
            DirectoryEntry(name=PurePosixPath(name).name, path=name, kind="file")
            for name in sorted(self.files)
            if str(PurePosixPath(name).parent) == prefix
        ]


@pytest.fixture
def sample_report_text() -> str:
    return SAMPLE_REPORT


@pytest.fixture
def full_report() -> ProgressReport:
    return ProgressReport(
        project_id="chronicle",
        project_name="Chronicle",
        date=REPORT_DAY,
        completed_tasks=["Shipped the progress parser", "Added severity markers"],
        issues=[
            ProgressIssue(description="Deploy pipeline flaky", severity=Severity.HIGH),
            ProgressIssue(
                description="Login loop",
                symptom="Users bounced back to /login",
                root_cause="Stale session cookie",
                fix="Cleared cookie on logout",
                learning="Test the logout path",
            ),
        ],
        next_steps=["Add caching headers", "Write docs"],
        impact_summary="Parser now handles real reports. Posts take seconds.",
    )


@pytest.fixture
def empty_report() -> ProgressReport:
    return ProgressReport(project_id="quiet", project_name="Quiet", date=REPORT_DAY)
