"""Protocol for relevance scoring."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from knowledge_federation.models.domain import (
    CandidateItem,
    ChatContext,
    ScoredItem,
    ScoreKind,
)


class RelevanceScorer(Protocol):
    def plain_score(self, query: str, text: str) -> float: ...

    def contextual_score(
        self,
        query: str,
        item: CandidateItem,
        context: ChatContext | None,
        now: datetime,
    ) -> float: ...

    def score_items(
        self,
        query: str,
        items: list[CandidateItem],
        kind: ScoreKind,
        context: ChatContext | None = None,
        now: datetime | None = None,
    ) -> list[ScoredItem]:
        """Score every item with one kind; contextual scoring needs ``now``."""
        ...
