"""Keyword relevance scoring: plain text match plus contextual boosts."""

from __future__ import annotations

from datetime import datetime

from knowledge_federation.config.constants import ACTIVE_STATUSES
from knowledge_federation.config.settings import Settings
from knowledge_federation.models.domain import (
    CandidateItem,
    ChatContext,
    ScoredItem,
    ScoreKind,
)
from knowledge_federation.retrieval.filters import segment_sources


def query_words(query: str) -> list[str]:
    """Distinct lowercase words of the query, in first-seen order."""
    return list(dict.fromkeys(query.lower().split()))


class KeywordRelevanceScorer:
    """Substring-match scorer.

    Plain score: exact full-query match credit, plus a credit per distinct
    query word found, damped for long texts and capped at ``s_max``.
    Contextual score adds segment, recency, priority and status boosts and
    is capped at ``contextual_s_max``.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def plain_score(self, query: str, text: str) -> float:
        s = self._settings
        q = query.strip().lower()
        if not q or not text:
            return 0.0
        text_lower = text.lower()

        score = 0.0
        if q in text_lower:
            score += s.exact_match_credit
        for word in query_words(q):
            if word in text_lower:
                score += s.word_credit

        if len(text) > s.long_text_threshold:
            score *= s.long_text_penalty

        return min(score, s.s_max)

    def contextual_score(
        self,
        query: str,
        item: CandidateItem,
        context: ChatContext | None,
        now: datetime,
    ) -> float:
        s = self._settings
        score = self.plain_score(query, item.searchable_text)

        allowed = segment_sources(context.segment if context else None)
        if allowed is not None and item.type in allowed:
            score += s.segment_boost

        age_days = (now - item.created_at).total_seconds() / 86400
        if age_days < 1:
            score += s.recency_today_boost
        elif age_days < 7:
            score += s.recency_week_boost
        elif age_days < 30:
            score += s.recency_month_boost

        priority = str(item.attrs.get("priority") or "").lower()
        urgency = _as_number(item.attrs.get("urgency"))
        if priority == "critical" or urgency >= 8:
            score += s.critical_boost
        if priority == "high" or urgency >= 6:
            score += s.high_priority_boost

        status = str(item.attrs.get("status") or "").lower()
        if status in ACTIVE_STATUSES:
            score += s.active_status_boost

        return max(0.0, min(score, s.contextual_s_max))

    def score_items(
        self,
        query: str,
        items: list[CandidateItem],
        kind: ScoreKind,
        context: ChatContext | None = None,
        now: datetime | None = None,
    ) -> list[ScoredItem]:
        if kind is ScoreKind.CONTEXTUAL:
            if now is None:
                raise ValueError("contextual scoring needs a reference time")
            return [
                ScoredItem(item, self.contextual_score(query, item, context, now), kind)
                for item in items
            ]
        return [
            ScoredItem(item, self.plain_score(query, item.searchable_text), kind)
            for item in items
        ]


def _as_number(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
