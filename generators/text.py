"""Text helpers shared by the document generators."""

import re
from datetime import date

WORDS_PER_MINUTE = 200
MAX_EXCERPT_LENGTH = 160

_MARKDOWN_STRIP = (
    (re.compile(r"```[\s\S]*?```"), ""),            # code blocks
    (re.compile(r"`[^`]+`"), ""),                   # inline code
    (re.compile(r"<[^>]+>"), ""),                   # HTML tags
    (re.compile(r"!\[[^\]]*\]\([^)]+\)"), ""),      # images
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),  # links -> text
    (re.compile(r"^#+\s+", re.MULTILINE), ""),
    (re.compile(r"[*_]{1,2}([^*_]+)[*_]{1,2}"), r"\1"),
    (re.compile(r"^[-*_]{3,}$", re.MULTILINE), ""),
    (re.compile(r"^>\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""),
)


def word_count(markdown: str) -> int:
    """Count words in markdown after stripping formatting."""
    if not markdown:
        return 0
    text = markdown
    for pattern, replacement in _MARKDOWN_STRIP:
        text = pattern.sub(replacement, text)
    return len(text.split())


def read_time(markdown: str) -> int:
    """Estimated reading time in minutes (~200 wpm, minimum 1)."""
    return max(1, -(-word_count(markdown) // WORDS_PER_MINUTE))


def slugify(value: str) -> str:
    """Lowercase kebab-case slug (``"My Project!"`` -> ``"my-project"``)."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def truncate(text: str, limit: int = MAX_EXCERPT_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def plural(count: int, noun: str) -> str:
    """``plural(1, "task")`` -> ``"1 task"``; ``plural(3, "task")`` -> ``"3 tasks"``."""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def long_date(day: date) -> str:
    """Format as ``Thursday, November 20, 2025``."""
    return f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}, {day.year}"


def medium_date(day: date) -> str:
    """Format as ``November 20, 2025``."""
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def first_sentence(text: str) -> str:
    return re.split(r"[.!?]", text, maxsplit=1)[0].strip()


def single_line(text: str) -> str:
    """Collapse all whitespace (including newlines) to single spaces."""
    return re.sub(r"\s+", " ", text).strip()
