"""Collaborator contracts for document sources.

All I/O in the pipeline goes through these two interfaces so the parsers
and generators only ever see already-fetched text.

DocumentFetcher:
    Remote (per tracked project) file access. Implementations raise
    DocumentNotFound for missing resources and for any transport error,
    and AccessDenied for authentication/permission failures.

LogSource:
    Local dated log documents feeding the activity feed.
"""

from dataclasses import dataclass
from typing import Literal, Protocol

from models.activity import RawDocument


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry of a directory listing."""

    name: str
    path: str
    kind: Literal["file", "dir"] = "file"


class DocumentFetcher(Protocol):
    async def fetch_file(self, path: str) -> str:
        """Return file text, or raise DocumentNotFound / AccessDenied."""
        ...

    async def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List a directory; a missing directory lists as empty."""
        ...


class LogSource(Protocol):
    def list_recent_documents(self, max_age_days: int) -> list[RawDocument]:
        """Return readable documents modified within the window."""
        ...
