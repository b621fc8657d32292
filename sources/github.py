"""GitHub contents API fetcher.

Implements the DocumentFetcher contract for one repository using aiohttp.
Used to pull per-project progress reports for daily aggregation.

Features:
    - Public repos without a token, private repos with a bearer token
    - Shared client session (connection pooling across projects)
    - certifi-backed SSL verification

Error Mapping:
    - 401 / 403 (permissions)      -> AccessDenied
    - 403 with rate limit exhausted -> DocumentNotFound (retry later)
    - 404 and any other non-200     -> DocumentNotFound
    - Timeouts and client errors    -> DocumentNotFound
    Listing a missing directory returns an empty list instead of raising.

Tokens are never logged.
"""

import asyncio
import base64
import logging
import re
import ssl
from typing import Any
from urllib.parse import quote

import aiohttp
import certifi

from errors import AccessDenied, DocumentNotFound, FetchError
from sources.base import DirectoryEntry

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
USER_AGENT = "Chronicle-ProgressFetcher/1.0"

_SSH_URL = re.compile(r"git@github\.com:([^/]+)/(.+)")
_HTTPS_URL = re.compile(r"github\.com/([^/]+)/([^/]+)")
_SHORT_URL = re.compile(r"^([^/\s]+)/([^/\s]+)$")


def create_ssl_context() -> ssl.SSLContext:
    """Create an SSL context that verifies against the certifi bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def parse_github_url(url: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub URL.

    Supports:
        - https://github.com/owner/repo
        - https://github.com/owner/repo.git
        - git@github.com:owner/repo.git
        - owner/repo

    Returns:
        (owner, repo), or None if the URL is not recognized
    """
    if not url or not isinstance(url, str):
        return None
    url = re.sub(r"\.git$", "", url.strip().rstrip("/"))

    for pattern in (_SSH_URL, _HTTPS_URL, _SHORT_URL):
        match = pattern.search(url)
        if match:
            return match.group(1), match.group(2)
    return None


class GitHubFetcher:
    """DocumentFetcher for a single GitHub repository.

    Example:
        >>> async with aiohttp.ClientSession() as session:
        ...     fetcher = GitHubFetcher("owner", "repo", session=session)
        ...     text = await fetcher.fetch_file("progress/2025-11-20.md")
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str = "",
        *,
        branch: str | None = None,
        api_url: str = GITHUB_API_URL,
        timeout: int = 30,
        session: aiohttp.ClientSession | None = None,
    ):
        """Initialize the fetcher.

        Args:
            owner: Repository owner (user or org)
            repo: Repository name
            token: Optional token for private repositories
            branch: Optional ref; defaults to the repository default branch
            api_url: API base URL (GitHub Enterprise support)
            timeout: Request timeout in seconds
            session: Shared client session; a short-lived one is created
                     per request when omitted
        """
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._session = session

    def __repr__(self) -> str:
        return f"GitHubFetcher({self.owner}/{self.repo})"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _contents_url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/contents/{quote(path.strip('/'))}"

    async def _get(self, session: aiohttp.ClientSession, path: str) -> Any:
        params = {"ref": self.branch} if self.branch else None
        async with session.get(
            self._contents_url(path),
            params=params,
            headers=self._headers(),
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            ssl=create_ssl_context(),
        ) as resp:
            if resp.status == 403 and resp.headers.get("x-ratelimit-remaining") == "0":
                raise DocumentNotFound("GitHub API rate limit exceeded", path=path, status=403)
            if resp.status in (401, 403):
                raise AccessDenied(
                    f"Access denied to {self.owner}/{self.repo}:{path}", path=path, status=resp.status,
                )
            if resp.status != 200:
                raise DocumentNotFound(
                    f"{self.owner}/{self.repo}:{path} not available (HTTP {resp.status})",
                    path=path, status=resp.status,
                )
            return await resp.json(content_type=None)

    async def _request(self, path: str) -> Any:
        """GET a contents path, mapping every failure onto the FetchError taxonomy."""
        try:
            if self._session is not None:
                return await self._get(self._session, path)
            async with aiohttp.ClientSession() as session:
                return await self._get(session, path)
        except FetchError:
            raise
        except asyncio.TimeoutError:
            logger.warning("GitHub request timed out | repo=%s/%s path=%s", self.owner, self.repo, path)
            raise DocumentNotFound(f"Request timed out after {self.timeout}s", path=path)
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning(
                "GitHub request failed | repo=%s/%s path=%s error=%s (%s)",
                self.owner, self.repo, path, e, type(e).__name__,
            )
            raise DocumentNotFound(str(e) or type(e).__name__, path=path)

    async def fetch_file(self, path: str) -> str:
        """Fetch and decode a file's text content.

        Raises:
            DocumentNotFound: File missing, is a directory, or request failed
            AccessDenied: Token missing/invalid or insufficient permissions
        """
        data = await self._request(path)
        if not isinstance(data, dict) or not data.get("content"):
            raise DocumentNotFound(f"No file content at {path}", path=path)
        try:
            raw = base64.b64decode(data["content"])
        except (ValueError, TypeError) as e:
            raise DocumentNotFound(f"Undecodable content at {path}: {e}", path=path)
        logger.debug("GitHub file fetched | repo=%s/%s path=%s bytes=%d", self.owner, self.repo, path, len(raw))
        return raw.decode("utf-8", errors="replace")

    async def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List a directory; returns [] when it does not exist.

        Raises:
            AccessDenied: Token missing/invalid or insufficient permissions
            DocumentNotFound: Transport failure
        """
        try:
            data = await self._request(path)
        except DocumentNotFound as e:
            if e.status == 404:
                return []
            raise

        if not isinstance(data, list):
            return []
        return [
            DirectoryEntry(
                name=entry.get("name", ""),
                path=entry.get("path", ""),
                kind="dir" if entry.get("type") == "dir" else "file",
            )
            for entry in data
            if isinstance(entry, dict)
        ]
