"""Keyword-based intent classification and query normalization."""

from __future__ import annotations

import re
import unicodedata

from knowledge_federation.config.constants import INTENT_KEYWORDS
from knowledge_federation.models.domain import IntentTag


def normalize_query(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    return re.sub(r"\s+", " ", text).strip()


def classify_intent(query: str) -> list[IntentTag]:
    """Map query text to an ordered, non-empty list of intent tags.

    A tag fires when any of its keywords is a case-insensitive substring of
    the query, so "planning" also fires on "plan" and "add" on "address".
    Several tags may fire; ``[IntentTag.GENERAL]`` is returned when none do.
    """
    q = normalize_query(query).lower()
    tags = [
        tag
        for tag, keywords in INTENT_KEYWORDS.items()
        if any(keyword in q for keyword in keywords)
    ]
    return tags or [IntentTag.GENERAL]
