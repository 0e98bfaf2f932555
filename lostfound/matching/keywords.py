"""Keyword extraction for item text.

Turns free text into a set of significant, case-folded terms used by the
keyword and location factors of the similarity scorer.
"""

import re
from typing import Optional, Set

from lostfound.domain.models import Item

MIN_TOKEN_LENGTH = 3

STOPWORDS = frozenset({
    # Function words
    "the", "a", "an", "is", "are", "was", "were", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "my", "i", "it", "and", "or", "but", "not", "this",
    "that", "very", "just", "have", "has", "had", "been", "its", "into", "your",
    "our", "any", "some", "who", "can", "will", "you",
    # Marketplace filler that appears in almost every post
    "lost", "found", "item", "please", "help", "looking", "someone", "near",
    "around", "campus", "today", "yesterday",
})

_NON_ALNUM = re.compile(r"[^a-z0-9\s]+")


def _fold_plural(token: str) -> str:
    """Strip a simple plural 's' ("bags" -> "bag", but not "glass" or "bus")."""
    if len(token) > MIN_TOKEN_LENGTH and token.endswith("s") and not token.endswith("ss"):
        return token[:-1]
    return token


def extract_keywords(text: Optional[str]) -> Set[str]:
    """
    Extract normalized keywords from free text.

    Lowercases, replaces punctuation with spaces, drops stopwords and tokens
    shorter than three characters, folds simple plurals and collapses
    duplicates.

    Args:
        text: Any text; None and whitespace-only input yield an empty set

    Returns:
        Set of keywords

    Example:
        >>> sorted(extract_keywords("Lost: Black Bags near the Library!"))
        ['bag', 'black', 'library']
    """
    if not text or not text.strip():
        return set()

    cleaned = _NON_ALNUM.sub(" ", text.lower())

    keywords = set()
    for token in cleaned.split():
        if len(token) < MIN_TOKEN_LENGTH or token in STOPWORDS:
            continue
        token = _fold_plural(token)
        if token not in STOPWORDS:
            keywords.add(token)
    return keywords


def item_keywords(item: Item) -> Set[str]:
    """Keywords from an item's title and description combined."""
    text = " ".join(part for part in (item.title, item.description) if part)
    return extract_keywords(text)
