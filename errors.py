"""Error types for the Chronicle pipeline.

Only collaborator-level failures are modeled as exceptions. Malformed input
is never raised: parsers degrade to best-effort defaults instead, and an
aggregation with nothing to report is returned as ``AggregateEmpty``.

Hierarchy:
    ChronicleError
    └── FetchError
        ├── DocumentNotFound  (missing resource or any transport failure)
        └── AccessDenied      (authentication / permission failure)
"""


class ChronicleError(Exception):
    """Base class for all pipeline errors."""


class FetchError(ChronicleError):
    """A document could not be retrieved from a collaborator.

    Attributes:
        path: Path that was requested
        status: HTTP status code when the failure came from a remote API
    """

    def __init__(self, message: str, path: str = "", status: int | None = None):
        super().__init__(message)
        self.path = path
        self.status = status


class DocumentNotFound(FetchError):
    """Requested document or directory does not exist (or was unreachable)."""


class AccessDenied(FetchError):
    """Collaborator refused access to the requested document."""
