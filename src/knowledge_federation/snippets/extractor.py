"""Bounded excerpts around the best query match in an item's text."""

from __future__ import annotations

import re

from knowledge_federation.config.constants import ELLIPSIS
from knowledge_federation.scoring.relevance import query_words


def find_match(text: str, query: str) -> tuple[int, int]:
    """Return (position, length) of the best match, or (-1, 0).

    The full query wins; otherwise the first query word (in query order)
    that occurs anywhere in the text.
    """
    q = query.strip()
    if not q:
        return -1, 0
    m = re.search(re.escape(q), text, re.IGNORECASE)
    if m:
        return m.start(), m.end() - m.start()
    for word in query_words(q):
        m = re.search(re.escape(word), text, re.IGNORECASE)
        if m:
            return m.start(), m.end() - m.start()
    return -1, 0


def extract_snippet(text: str, query: str, max_length: int = 150, lead: int = 50) -> str:
    """Extract at most ``max_length`` characters around the best match.

    The window opens ``lead`` characters before the match, shifted right if
    needed so the whole match fits. Ellipsis markers count towards
    ``max_length``. Without any match the text prefix is returned.
    """
    if not text or len(text) <= max_length:
        return text or ""
    marker = len(ELLIPSIS)
    if max_length <= 2 * marker:
        return text[:max_length]

    pos, match_len = find_match(text, query)
    if pos < 0:
        return text[: max_length - marker] + ELLIPSIS

    width = max_length - 2 * marker
    start = max(0, pos - lead)
    if match_len <= width and pos + match_len > start + width:
        start = pos + match_len - width
    start = min(start, len(text) - width)

    if start <= 0:
        start, end = 0, max_length - marker
    else:
        end = min(len(text), start + width)
        if end == len(text):
            # No trailing marker at the tail, so widen the window backwards.
            start = len(text) - (max_length - marker)

    snippet = text[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(text):
        snippet = snippet + ELLIPSIS
    return snippet
