"""Local filesystem sources.

DirectoryLogSource:
    Dated daily log files (``memory/2025-11-20.md``) for the activity feed.

ProgressDirectory:
    Local progress report files, with listing and safe path resolution.

LocalDocumentFetcher:
    DocumentFetcher over a local directory tree. Lets a tracked project
    live on disk (or in a checkout) instead of on GitHub.

Error Handling Strategy:
    - Unreadable files are logged at WARNING and skipped
    - Missing files raise DocumentNotFound, like the remote fetcher
    - Paths escaping the root are rejected with ValueError
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from errors import DocumentNotFound
from models.activity import RawDocument
from models.progress import ProgressFileInfo
from parsers.progress import extract_content_date, extract_date_from_filename, parse_progress_report
from sources.base import DirectoryEntry

logger = logging.getLogger(__name__)


def _read_document(path: Path, name: str | None = None) -> RawDocument:
    """Read a file into a RawDocument (raises OSError / UnicodeDecodeError)."""
    content = path.read_text(encoding="utf-8")
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return RawDocument(
        name=name or path.name,
        raw_text=content,
        modified_at=modified,
        source_path=str(path),
    )


class DirectoryLogSource:
    """Reads recent markdown logs from a directory."""

    def __init__(self, directory: Path, pattern: str = "*.md"):
        self.directory = Path(directory)
        self.pattern = pattern

    def list_recent_documents(
        self,
        max_age_days: int = 7,
        now: datetime | None = None,
    ) -> list[RawDocument]:
        """Load documents modified within the last ``max_age_days``.

        Args:
            max_age_days: Recency window in days
            now: Reference instant (defaults to current UTC time)

        Returns:
            Documents sorted by filename; unreadable files are skipped
        """
        if not self.directory.is_dir():
            logger.warning("Log directory not found | path=%s", self.directory)
            return []

        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=max_age_days)
        documents = []
        skipped = 0

        for path in sorted(self.directory.glob(self.pattern)):
            if not path.is_file():
                continue
            try:
                document = _read_document(path)
            except (OSError, UnicodeDecodeError) as e:
                skipped += 1
                logger.warning("Log read failed | file=%s error=%s (%s)", path.name, e, type(e).__name__)
                continue
            if document.modified_at >= cutoff:
                documents.append(document)

        logger.debug(
            "Log documents loaded | dir=%s documents=%d unreadable=%d",
            self.directory, len(documents), skipped,
        )
        return documents


class ProgressDirectory:
    """Local directory of progress report markdown files."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def resolve(self, relative_path: str) -> Path:
        """Resolve a path inside the progress directory.

        Raises:
            ValueError: Absolute path, parent traversal, non-markdown file,
                        or a path that resolves outside the root
        """
        candidate = Path(relative_path)
        if candidate.is_absolute() or ".." in candidate.parts:
            raise ValueError(f"Invalid file path: {relative_path}")
        if candidate.suffix.lower() != ".md":
            raise ValueError("Only .md files are allowed")

        root = self.root.resolve()
        full = (root / candidate).resolve()
        if full != root and root not in full.parents:
            raise ValueError("File must be within the progress directory")
        return full

    def read(self, relative_path: str) -> RawDocument:
        """Read a progress file.

        Raises:
            ValueError: Path rejected by resolve()
            DocumentNotFound: File missing or unreadable
        """
        path = self.resolve(relative_path)
        try:
            return _read_document(path, name=path.name)
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentNotFound(f"Could not read {relative_path}: {e}", path=relative_path)

    def list_files(self) -> list[ProgressFileInfo]:
        """List progress files with parsed metadata, newest report date first.

        Files without a date sort last, then by name.
        """
        if not self.root.is_dir():
            logger.warning("Progress directory not found | path=%s", self.root)
            return []

        files = []
        for path in self.root.rglob("*.md"):
            if not path.is_file():
                continue
            relative = path.relative_to(self.root).as_posix()
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Progress read failed | file=%s error=%s", relative, e)
                continue

            file_date = extract_date_from_filename(path.name)
            report = parse_progress_report(content, file_date, filename=path.name, source_path=relative)
            files.append(ProgressFileInfo(
                name=path.name,
                path=relative,
                date=file_date or extract_content_date(content),
                project_name=report.project_name,
                task_count=len(report.completed_tasks),
                issue_count=len(report.issues),
                size=path.stat().st_size,
            ))

        files.sort(key=lambda info: info.name)
        files.sort(key=lambda info: info.date.toordinal() if info.date else 0, reverse=True)
        return files


class LocalDocumentFetcher:
    """DocumentFetcher backed by a local directory (e.g. a repo checkout)."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"LocalDocumentFetcher({self.root})"

    def _path(self, path: str) -> Path:
        candidate = Path(path.strip("/"))
        if ".." in candidate.parts:
            raise DocumentNotFound(f"Invalid path: {path}", path=path)
        return self.root / candidate

    async def fetch_file(self, path: str) -> str:
        target = self._path(path)
        try:
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentNotFound(f"Could not read {path}: {e}", path=path)

    async def list_directory(self, path: str) -> list[DirectoryEntry]:
        target = self._path(path)
        if not target.is_dir():
            return []
        return [
            DirectoryEntry(
                name=child.name,
                path=child.relative_to(self.root).as_posix(),
                kind="dir" if child.is_dir() else "file",
            )
            for child in sorted(target.iterdir())
        ]
