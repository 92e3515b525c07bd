"""Context assembly: ranked results plus recent turns into a bounded bundle."""

from __future__ import annotations

from collections import Counter
from datetime import datetime

from knowledge_federation.config.constants import TYPE_PLURALS, TYPE_SINGULARS
from knowledge_federation.config.settings import Settings
from knowledge_federation.models.domain import (
    ChatMessage,
    ChatSession,
    ContextBundle,
    ContextEntry,
    RankedResult,
    SourceType,
)


def recency_bucket(created_at: datetime, now: datetime) -> str:
    age_days = (now - created_at).total_seconds() / 86400
    if age_days < 1:
        return "today"
    if age_days < 7:
        return "this_week"
    if age_days < 30:
        return "this_month"
    return "older"


def summarize_counts(counts: dict[str, int]) -> str:
    """Render per-type counts as "3 notes, 2 meetings, 1 stakeholder"."""
    if not counts:
        return "No matching records"
    parts = []
    for type_name, n in counts.items():
        source_type = SourceType(type_name)
        label = TYPE_SINGULARS[source_type] if n == 1 else TYPE_PLURALS[source_type]
        parts.append(f"{n} {label}")
    return ", ".join(parts)


class ContextAssembler:
    def __init__(self, settings: Settings) -> None:
        self._cap = settings.chat_context_cap
        self._history_turns = settings.history_turns

    def assemble(self, results: list[RankedResult], now: datetime) -> ContextBundle:
        kept = results[: self._cap]
        entries = [
            ContextEntry(
                type=r.item.type,
                title=r.item.title,
                snippet=r.snippet,
                recency=recency_bucket(r.item.created_at, now),
                score=round(r.score, 4),
            )
            for r in kept
        ]
        # Most common type first; ties keep rank order of first appearance.
        counts = dict(Counter(r.item.type.value for r in kept).most_common())
        return ContextBundle(
            entries=entries,
            results=kept,
            counts=counts,
            preamble=summarize_counts(counts),
        )

    def recent_history(self, session: ChatSession) -> list[ChatMessage]:
        if self._history_turns <= 0:
            return []
        return list(session.messages[-self._history_turns :])
