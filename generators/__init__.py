"""Narrative generators.

generate_full / generate_summary:
    Render one ProgressReport as a publishable document.

aggregate / render_daily_update:
    Combine many projects' reports for one date.

Example:
    >>> from generators import generate_full
    >>> doc = generate_full(report)
    >>> doc == generate_full(report)
    True
"""

from generators.narrative import (
    STEADY_PROGRESS_SENTENCE,
    generate,
    generate_full,
    generate_summary,
)
from generators.daily import aggregate, render_daily_update

__all__ = [
    "STEADY_PROGRESS_SENTENCE",
    "generate",
    "generate_full",
    "generate_summary",
    "aggregate",
    "render_daily_update",
]
