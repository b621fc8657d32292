"""Keyword taxonomy for activity lines.

Classification is two-step:

    1. Gate: a line is only an activity if it contains at least one word from
       the action vocabulary. Callers drop lines that fail the gate instead
       of classifying them.
    2. Rules: ordered (Category, keywords) pairs, checked top to bottom with
       case-insensitive substring containment. First match wins; no match
       falls through to Category.OTHER.

Matching is by substring, so "dm" also matches inside "admin". Rule order
decides which bucket ambiguous lines land in.
"""

import re

from models.activity import Category

# Verbs that mark a line as something that was actually done
ACTION_VOCABULARY: frozenset[str] = frozenset({
    "published", "posted", "tweeted", "sent", "emailed", "messaged", "replied",
    "built", "fixed", "deployed", "committed", "pushed", "merged",
    "shipped", "launched", "released",
    "created", "wrote", "drafted", "updated",
    "added", "implemented", "refactored", "completed", "finished", "scheduled",
})

CATEGORY_RULES: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.CONTENT, ("published", "blog", "article")),
    (Category.SOCIAL, ("posted", "tweet", "linkedin", "x.com")),
    (Category.OUTREACH, ("sent", "email", "dm", "messaged")),
    (Category.DEVELOPMENT, ("built", "fixed", "deployed", "committed", "pushed")),
    (Category.DOCUMENT, ("created", "wrote", "drafted", "updated")),
)

_WORD_PATTERN = re.compile(r"[a-z0-9]+")


def passes_gate(text: str) -> bool:
    """Check whether text contains at least one action word.

    Args:
        text: Candidate activity text

    Returns:
        True if any whole word is in ACTION_VOCABULARY
    """
    if not text:
        return False
    return any(word in ACTION_VOCABULARY for word in _WORD_PATTERN.findall(text.lower()))


def classify(text: str) -> Category:
    """Assign a category to activity text.

    Pure and total: any string maps to one of the six categories.

    Args:
        text: Activity text (should already have passed the gate)

    Returns:
        First matching Category, or Category.OTHER

    Example:
        >>> classify("Published blog post about AI search")
        <Category.CONTENT: 'content'>
    """
    lowered = (text or "").lower()
    for category, keywords in CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return Category.OTHER
