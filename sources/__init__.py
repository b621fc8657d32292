"""Document sources (all pipeline I/O lives here).

GitHubFetcher:
    Remote per-project file access over the GitHub contents API.

LocalDocumentFetcher / ProgressDirectory / DirectoryLogSource:
    Filesystem-backed equivalents for local projects, progress files and
    daily logs.
"""

from sources.base import DirectoryEntry, DocumentFetcher, LogSource
from sources.github import GitHubFetcher, parse_github_url
from sources.local import DirectoryLogSource, LocalDocumentFetcher, ProgressDirectory

__all__ = [
    "DirectoryEntry",
    "DocumentFetcher",
    "LogSource",
    "GitHubFetcher",
    "parse_github_url",
    "DirectoryLogSource",
    "LocalDocumentFetcher",
    "ProgressDirectory",
]
