"""Follow-up query suggestions mined from ranked results."""

from __future__ import annotations

from collections import Counter

from knowledge_federation.config.constants import SUGGESTION_MIN_WORD_LENGTH
from knowledge_federation.models.domain import RankedResult


def suggest_queries(query: str, results: list[RankedResult], limit: int = 3) -> list[str]:
    """Suggest ``"<query> <term>"`` for the terms most common in the results."""
    q = query.lower()
    terms: Counter[str] = Counter()
    for result in results:
        for word in f"{result.item.title} {result.snippet}".lower().split():
            if len(word) >= SUGGESTION_MIN_WORD_LENGTH and word not in q:
                terms[word] += 1

    top = sorted(terms.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    return [f"{query} {term}" for term, _ in top]
