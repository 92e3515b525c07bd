"""Federation pipeline: classify, fan out, score, rank, assemble, answer."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from knowledge_federation.cache.context_cache import ContextCache
from knowledge_federation.config.constants import APOLOGY_MESSAGE
from knowledge_federation.config.settings import Settings
from knowledge_federation.exceptions import QueryCancelled
from knowledge_federation.generation.context_assembler import ContextAssembler
from knowledge_federation.models.domain import (
    CandidateItem,
    ChatContext,
    ChatMessage,
    FanOutResult,
    IntentTag,
    RankedResult,
    ScoreKind,
    SearchOutcome,
    SourceType,
    utc_now,
)
from knowledge_federation.observability.logger import get_logger
from knowledge_federation.observability.metrics import (
    log_fan_out_metrics,
    log_latency,
    log_ranking_metrics,
)
from knowledge_federation.observability.tracing import TraceContext
from knowledge_federation.protocols.generator import Generator
from knowledge_federation.protocols.scorer import RelevanceScorer
from knowledge_federation.protocols.session_store import SessionStore
from knowledge_federation.query.intent import classify_intent, normalize_query
from knowledge_federation.ranking.ranker import rank
from knowledge_federation.ranking.suggestions import suggest_queries
from knowledge_federation.retrieval.fan_out import FanOutCoordinator
from knowledge_federation.snippets.extractor import extract_snippet

logger = get_logger("federation_pipeline")


class FederationPipeline:
    def __init__(
        self,
        coordinator: FanOutCoordinator,
        scorer: RelevanceScorer,
        assembler: ContextAssembler,
        generator: Generator,
        session_store: SessionStore,
        settings: Settings,
        cache: ContextCache | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._coordinator = coordinator
        self._scorer = scorer
        self._assembler = assembler
        self._generator = generator
        self._sessions = session_store
        self._settings = settings
        self._cache = cache
        self._clock = clock

    @property
    def source_names(self) -> list[str]:
        return [a.name for a in self._coordinator.adapters]

    def classify_intent(self, query: str) -> list[IntentTag]:
        return classify_intent(query)

    async def federated_search(
        self,
        query: str,
        context: ChatContext | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[RankedResult]:
        outcome = await self.search(query, context, cancel)
        return outcome.results

    async def search(
        self,
        query: str,
        context: ChatContext | None = None,
        cancel: asyncio.Event | None = None,
    ) -> SearchOutcome:
        """Cross-source search with contextual scoring, capped at ``search_result_cap``."""
        trace = TraceContext()
        start = time.monotonic()
        query = normalize_query(query)
        now = self._clock()

        with trace.span("intent"):
            intents = classify_intent(query)

        with trace.span("fan_out"):
            fan_out = await self._fan_out(query, intents, context, cancel, now, trace)

        with trace.span("ranking"):
            results, total = self._rank(
                query,
                fan_out.items,
                ScoreKind.CONTEXTUAL,
                self._settings.search_result_cap,
                context,
                now,
            )
        log_ranking_metrics(trace.trace_id, len(fan_out.items), results)

        suggestions = suggest_queries(query, results)
        elapsed_ms = (time.monotonic() - start) * 1000
        log_latency(trace.trace_id, "search", elapsed_ms)

        return SearchOutcome(
            results=results,
            total_results=total,
            search_time_ms=round(elapsed_ms, 2),
            suggestions=suggestions,
            failed_sources=list(fan_out.failed),
            timed_out_sources=list(fan_out.timed_out),
        )

    async def search_source(self, query: str, source_type: SourceType) -> list[RankedResult]:
        """Search the adapters of one source type, ranked by plain score."""
        query = normalize_query(query)
        adapters = [a for a in self._coordinator.adapters if a.source_type == source_type]
        if not adapters:
            return []

        coordinator = FanOutCoordinator(adapters, self._settings)
        fan_out = await coordinator.gather(query, classify_intent(query), now=self._clock())
        results, _ = self._rank(
            query, fan_out.items, ScoreKind.PLAIN, self._settings.search_result_cap
        )
        return results

    async def answer(
        self,
        query: str,
        session_id: str,
        context: ChatContext | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ChatMessage:
        """Answer one user turn and record both turns in the session.

        Session read and write failures propagate. A failing generation step
        is replaced by a fixed apology so the user's turn is still recorded.
        """
        trace = TraceContext()
        start = time.monotonic()
        query = normalize_query(query)
        now = self._clock()

        with trace.span("session_read"):
            session = await self._sessions.get_session(session_id)

        with trace.span("intent"):
            intents = classify_intent(query)

        with trace.span("fan_out"):
            fan_out = await self._fan_out(query, intents, context, cancel, now, trace)

        with trace.span("ranking"):
            results, total = self._rank(
                query,
                fan_out.items,
                ScoreKind.CONTEXTUAL,
                self._settings.chat_context_cap,
                context,
                now,
            )
        log_ranking_metrics(trace.trace_id, len(fan_out.items), results)

        bundle = self._assembler.assemble(results, now)
        history = self._assembler.recent_history(session)

        degraded = False
        with trace.span("generation"):
            try:
                content = await self._generator.generate(bundle, history, query, context)
            except Exception as e:
                logger.warning(
                    "generation_degraded",
                    trace_id=trace.trace_id,
                    session_id=session_id,
                    error=str(e),
                )
                content = APOLOGY_MESSAGE
                degraded = True

        if cancel is not None and cancel.is_set():
            logger.info("answer_discarded", trace_id=trace.trace_id, session_id=session_id)
            raise QueryCancelled(f"query superseded: {query!r}")

        user_message = ChatMessage(
            id=f"msg_{uuid4().hex}",
            role="user",
            content=query,
            timestamp=now,
        )
        assistant_message = ChatMessage(
            id=f"msg_{uuid4().hex}",
            role="assistant",
            content=content,
            timestamp=max(self._clock(), now),
            sources=list(bundle.results),
            metadata={
                "degraded": degraded,
                "intents": [t.value for t in intents],
                "search_results": total,
                "failed_sources": list(fan_out.failed),
                "timed_out_sources": list(fan_out.timed_out),
                "processing_time_ms": round((time.monotonic() - start) * 1000, 2),
                "trace_id": trace.trace_id,
            },
        )

        with trace.span("session_write"):
            await self._sessions.append_message(session_id, user_message)
            await self._sessions.append_message(session_id, assistant_message)

        logger.info(
            "answer_complete",
            trace_id=trace.trace_id,
            session_id=session_id,
            sources=len(bundle.results),
            degraded=degraded,
            stages=trace.stage_durations(),
        )
        return assistant_message

    async def _fan_out(
        self,
        query: str,
        intents: list[IntentTag],
        context: ChatContext | None,
        cancel: asyncio.Event | None,
        now: datetime,
        trace: TraceContext,
    ) -> FanOutResult:
        if self._cache is not None:
            cached = self._cache.get(query, context)
            if cached is not None:
                log_fan_out_metrics(trace.trace_id, cached, cached=True)
                return cached

        result = await self._coordinator.gather(query, intents, context, cancel, now)
        log_fan_out_metrics(trace.trace_id, result)

        # Degraded fan-outs are not memoized.
        if self._cache is not None and not result.failed and not result.timed_out:
            self._cache.put(query, context, result)
        return result

    def _rank(
        self,
        query: str,
        items: list[CandidateItem],
        kind: ScoreKind,
        cap: int,
        context: ChatContext | None = None,
        now: datetime | None = None,
    ) -> tuple[list[RankedResult], int]:
        """Score, rank and snippet; also returns the distinct candidate count."""
        if kind is ScoreKind.CONTEXTUAL:
            scored = self._scorer.score_items(query, items, kind, context, now)
        else:
            scored = self._scorer.score_items(query, items, kind)
        ranked = rank(scored, cap)
        total = len({item.key for item in items})
        results = [
            RankedResult(
                item=s.item,
                score=s.score,
                kind=s.kind,
                snippet=extract_snippet(
                    s.item.text or s.item.title,
                    query,
                    self._settings.snippet_max_length,
                    self._settings.snippet_lead,
                ),
            )
            for s in ranked
        ]
        return results, total
