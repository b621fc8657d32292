"""Activity feed models.

RawDocument is the ephemeral input read from a log source. ActivityEntry is
one classified, timestamped action extracted from a document line.

Category Design:
    The taxonomy is closed. Every entry lands in exactly one bucket and
    anything that passed the action gate without matching a keyword rule
    falls through to OTHER.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Activity categories, in classifier rule order.

    CONTENT: Published posts, blog entries, articles
    SOCIAL: Social media posts
    OUTREACH: Emails, DMs, direct messages
    DEVELOPMENT: Builds, fixes, deploys, commits
    DOCUMENT: Created or edited documents
    OTHER: Action words present but no category keyword matched
    """

    CONTENT = "content"
    SOCIAL = "social"
    OUTREACH = "outreach"
    DEVELOPMENT = "development"
    DOCUMENT = "document"
    OTHER = "other"


class RawDocument(BaseModel):
    """A text document read from a local or remote source.

    Attributes:
        name: Filename (e.g. ``2025-11-20.md``); may encode a date
        raw_text: Full document content
        modified_at: Last modification time (timezone-aware)
        source_path: Where the document was read from
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Document filename")
    raw_text: str = Field(default="", description="Full document text")
    modified_at: datetime = Field(description="Last modification time")
    source_path: str = Field(default="", description="Origin path or URL")

    @field_validator("modified_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive times from filesystem stats are treated as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ActivityEntry(BaseModel):
    """A single action extracted from a log document."""

    timestamp: datetime = Field(description="When the action happened")
    action: str = Field(description="Action text as written in the log")
    category: Category = Field(description="Taxonomy bucket")
    source: str = Field(description="Name of the document the line came from")

    def __str__(self) -> str:
        return f"ActivityEntry({self.timestamp.isoformat()}, {self.category.value}, '{self.action[:40]}')"
