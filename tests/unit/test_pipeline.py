"""Tests for the federation pipeline with fake collaborators."""

import asyncio
from datetime import timedelta

import pytest

from conftest import NOW, make_item
from knowledge_federation.cache.context_cache import ContextCache
from knowledge_federation.config.constants import APOLOGY_MESSAGE
from knowledge_federation.config.settings import Settings
from knowledge_federation.exceptions import (
    GenerationError,
    PersistenceError,
    QueryCancelled,
    SessionNotFoundError,
)
from knowledge_federation.generation.context_assembler import ContextAssembler
from knowledge_federation.models.domain import (
    ChatContext,
    ChatMessage,
    ChatSession,
    IntentTag,
    ScoreKind,
    SessionState,
    SourceType,
)
from knowledge_federation.pipeline.federation_pipeline import FederationPipeline
from knowledge_federation.ranking.ranker import rank
from knowledge_federation.retrieval.fan_out import FanOutCoordinator
from knowledge_federation.scoring.relevance import KeywordRelevanceScorer


class FakeAdapter:
    def __init__(self, source_type, items=(), error=None, on_search=None):
        self.source_type = source_type
        self.name = f"fake:{source_type.value}"
        self._items = list(items)
        self._error = error
        self._on_search = on_search
        self.calls = 0

    async def search(self, query, filter=None):
        self.calls += 1
        if self._on_search is not None:
            self._on_search()
        if self._error is not None:
            raise self._error
        return list(self._items)


class FakeGenerator:
    def __init__(self, reply="Here is what I found.", error=None):
        self._reply = reply
        self._error = error
        self.calls = []

    async def generate(self, bundle, history, query, context=None):
        self.calls.append((bundle, list(history), query, context))
        if self._error is not None:
            raise self._error
        return self._reply


class FakeSessionStore:
    def __init__(self, fail_append=False):
        self.sessions: dict[str, ChatSession] = {}
        self._fail_append = fail_append

    def add(self, session_id, messages=()):
        self.sessions[session_id] = ChatSession(
            id=session_id,
            user_id="u1",
            title="Chat",
            messages=list(messages),
            created_at=NOW,
            updated_at=NOW,
        )

    async def get_session(self, session_id):
        if session_id not in self.sessions:
            raise SessionNotFoundError(session_id)
        session = self.sessions[session_id]
        return ChatSession(
            id=session.id,
            user_id=session.user_id,
            title=session.title,
            messages=list(session.messages),
            created_at=session.created_at,
            updated_at=session.updated_at,
            state=session.state,
        )

    async def append_message(self, session_id, message):
        if self._fail_append:
            raise PersistenceError("disk full")
        session = self.sessions[session_id]
        session.messages.append(message)
        session.state = SessionState.ACTIVE


def _settings(**overrides) -> Settings:
    return Settings(google_api_key="x", fan_out_deadline_ms=500, **overrides)


def _pipeline(adapters, generator=None, store=None, cache=None, settings=None):
    settings = settings or _settings()
    store = store if store is not None else FakeSessionStore()
    return FederationPipeline(
        coordinator=FanOutCoordinator(adapters, settings),
        scorer=KeywordRelevanceScorer(settings),
        assembler=ContextAssembler(settings),
        generator=generator or FakeGenerator(),
        session_store=store,
        settings=settings,
        cache=cache,
        clock=lambda: NOW,
    )


STAKEHOLDER = make_item(
    SourceType.STAKEHOLDER,
    "s1",
    "Stakeholder escalation",
    "urgent stakeholder meeting requested by finance",
    timedelta(days=2),
    priority="high",
)
NOTE = make_item(
    SourceType.NOTE,
    "n1",
    "Meeting notes",
    "general meeting recap",
    timedelta(days=2),
    priority="low",
)


def test_stakeholder_ranks_first_under_contextual_scoring():
    scorer = KeywordRelevanceScorer(_settings())
    context = ChatContext(segment="stakeholders")
    scored = scorer.score_items(
        "urgent stakeholder meeting", [NOTE, STAKEHOLDER], ScoreKind.CONTEXTUAL, context, NOW
    )
    ranked = rank(scored, cap=10)
    assert ranked[0].item.id == "s1"
    assert ranked[0].score > ranked[1].score


async def test_federated_search_with_stakeholder_segment():
    pipeline = _pipeline(
        [FakeAdapter(SourceType.NOTE, [NOTE]), FakeAdapter(SourceType.STAKEHOLDER, [STAKEHOLDER])]
    )
    results = await pipeline.federated_search(
        "urgent stakeholder meeting", ChatContext(segment="stakeholders")
    )
    assert results[0].item.id == "s1"
    assert results[0].kind is ScoreKind.CONTEXTUAL


async def test_federated_search_survives_one_failing_adapter():
    pipeline = _pipeline(
        [
            FakeAdapter(SourceType.NOTE, [NOTE]),
            FakeAdapter(SourceType.MEETING, error=RuntimeError("boom")),
            FakeAdapter(SourceType.STAKEHOLDER, [STAKEHOLDER]),
        ]
    )
    outcome = await pipeline.search("meeting")
    assert {r.item.id for r in outcome.results} == {"n1", "s1"}
    assert outcome.failed_sources == ["fake:meeting"]
    assert outcome.total_results == 2


async def test_search_caps_and_dedups():
    items = [make_item(SourceType.NOTE, str(i % 30), "retro", "retro notes") for i in range(60)]
    pipeline = _pipeline([FakeAdapter(SourceType.NOTE, items)])
    outcome = await pipeline.search("retro")
    assert len(outcome.results) == 20
    assert len({r.key for r in outcome.results}) == 20
    assert outcome.total_results == 30


async def test_search_snippets_and_suggestions():
    item = make_item(
        SourceType.NOTE,
        "n1",
        "Checkout research",
        "x" * 300 + " coupon field causes drop-off " + "y" * 300,
    )
    pipeline = _pipeline([FakeAdapter(SourceType.NOTE, [item])])
    outcome = await pipeline.search("coupon field")
    assert "coupon field" in outcome.results[0].snippet
    assert len(outcome.results[0].snippet) <= 150
    assert 0 < len(outcome.suggestions) <= 3
    assert all(s.startswith("coupon field ") for s in outcome.suggestions)


async def test_search_source_uses_plain_scores():
    note_adapter = FakeAdapter(SourceType.NOTE, [NOTE])
    stakeholder_adapter = FakeAdapter(SourceType.STAKEHOLDER, [STAKEHOLDER])
    pipeline = _pipeline([note_adapter, stakeholder_adapter])
    results = await pipeline.search_source("meeting", SourceType.NOTE)
    assert [r.item.id for r in results] == ["n1"]
    assert results[0].kind is ScoreKind.PLAIN
    assert results[0].score == 10.0
    assert stakeholder_adapter.calls == 0


async def test_search_source_without_adapter():
    pipeline = _pipeline([FakeAdapter(SourceType.NOTE, [NOTE])])
    assert await pipeline.search_source("meeting", SourceType.MARKET) == []


async def test_cache_reuses_fan_out():
    adapter = FakeAdapter(SourceType.NOTE, [NOTE])
    pipeline = _pipeline([adapter], cache=ContextCache())
    await pipeline.search("meeting")
    await pipeline.search("Meeting")
    assert adapter.calls == 1


async def test_degraded_fan_out_is_not_cached():
    failing = FakeAdapter(SourceType.MEETING, error=RuntimeError("boom"))
    pipeline = _pipeline([FakeAdapter(SourceType.NOTE, [NOTE]), failing], cache=ContextCache())
    await pipeline.search("meeting")
    await pipeline.search("meeting")
    assert failing.calls == 2


def test_classify_intent_passthrough():
    pipeline = _pipeline([])
    assert pipeline.classify_intent("hello") == [IntentTag.GENERAL]


async def test_answer_appends_user_then_assistant():
    store = FakeSessionStore()
    store.add("chat_1")
    generator = FakeGenerator(reply="Talk to finance first.")
    pipeline = _pipeline(
        [FakeAdapter(SourceType.STAKEHOLDER, [STAKEHOLDER])], generator=generator, store=store
    )

    message = await pipeline.answer("urgent stakeholder meeting", "chat_1")

    assert message.role == "assistant"
    assert message.content == "Talk to finance first."
    assert message.metadata["degraded"] is False
    assert [s.item.id for s in message.sources] == ["s1"]

    stored = store.sessions["chat_1"].messages
    assert [m.role for m in stored] == ["user", "assistant"]
    assert stored[0].content == "urgent stakeholder meeting"
    assert stored[0].timestamp <= stored[1].timestamp

    bundle, history, query, _ = generator.calls[0]
    assert query == "urgent stakeholder meeting"
    assert history == []
    assert bundle.results == message.sources


async def test_answer_passes_recent_history():
    store = FakeSessionStore()
    earlier = [
        ChatMessage(id=str(i), role="user", content=f"turn {i}", timestamp=NOW - timedelta(hours=1))
        for i in range(8)
    ]
    store.add("chat_1", earlier)
    generator = FakeGenerator()
    pipeline = _pipeline([], generator=generator, store=store, settings=_settings(history_turns=3))
    await pipeline.answer("and now?", "chat_1")
    _, history, _, _ = generator.calls[0]
    assert [m.content for m in history] == ["turn 5", "turn 6", "turn 7"]


async def test_answer_chat_context_cap():
    items = [make_item(SourceType.NOTE, str(i), "retro", "retro") for i in range(30)]
    store = FakeSessionStore()
    store.add("chat_1")
    pipeline = _pipeline([FakeAdapter(SourceType.NOTE, items)], store=store)
    message = await pipeline.answer("retro", "chat_1")
    assert len(message.sources) == 10


async def test_generation_failure_degrades_and_keeps_user_turn():
    store = FakeSessionStore()
    store.add("chat_1")
    pipeline = _pipeline(
        [FakeAdapter(SourceType.NOTE, [NOTE])],
        generator=FakeGenerator(error=GenerationError("provider down")),
        store=store,
    )
    message = await pipeline.answer("meeting", "chat_1")
    assert message.content == APOLOGY_MESSAGE
    assert message.metadata["degraded"] is True
    stored = store.sessions["chat_1"].messages
    assert [m.role for m in stored] == ["user", "assistant"]
    assert stored[0].content == "meeting"


async def test_unexpected_generator_error_also_degrades():
    store = FakeSessionStore()
    store.add("chat_1")
    pipeline = _pipeline([], generator=FakeGenerator(error=KeyError("x")), store=store)
    message = await pipeline.answer("hi", "chat_1")
    assert message.content == APOLOGY_MESSAGE


async def test_persistence_failure_propagates():
    store = FakeSessionStore(fail_append=True)
    store.add("chat_1")
    pipeline = _pipeline([FakeAdapter(SourceType.NOTE, [NOTE])], store=store)
    with pytest.raises(PersistenceError):
        await pipeline.answer("meeting", "chat_1")


async def test_unknown_session_fails_before_generation():
    generator = FakeGenerator()
    pipeline = _pipeline([FakeAdapter(SourceType.NOTE, [NOTE])], generator=generator)
    with pytest.raises(SessionNotFoundError):
        await pipeline.answer("meeting", "missing")
    assert generator.calls == []


async def test_cancelled_answer_records_nothing():
    store = FakeSessionStore()
    store.add("chat_1")
    cancel = asyncio.Event()
    adapter = FakeAdapter(SourceType.NOTE, [NOTE], on_search=cancel.set)
    pipeline = _pipeline([adapter], store=store)
    with pytest.raises(QueryCancelled):
        await pipeline.answer("meeting", "chat_1", cancel=cancel)
    assert store.sessions["chat_1"].messages == []
