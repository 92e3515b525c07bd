"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from knowledge_federation.models.domain import (
    AdapterFilter,
    ChatContext,
    ChatMessage,
    ChatSession,
    RankedResult,
    SearchOutcome,
)


class FilterModel(BaseModel):
    date_from: datetime | None = None
    date_to: datetime | None = None
    priority: list[str] | None = None
    status: list[str] | None = None

    def to_domain(self) -> AdapterFilter:
        return AdapterFilter(
            date_from=self.date_from,
            date_to=self.date_to,
            priority=tuple(self.priority) if self.priority else None,
            status=tuple(self.status) if self.status else None,
        )


class ContextModel(BaseModel):
    segment: str | None = None
    entity_id: str | None = None
    entity_type: str | None = None
    user_role: str | None = None
    filters: FilterModel | None = None

    def to_domain(self) -> ChatContext:
        return ChatContext(
            segment=self.segment,
            entity_id=self.entity_id,
            entity_type=self.entity_type,
            user_role=self.user_role,
            filters=self.filters.to_domain() if self.filters else None,
        )


class IntentRequest(BaseModel):
    query: str


class IntentResponse(BaseModel):
    intents: list[str]


class SearchRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(min_length=1)
    context: ContextModel | None = None


class SourceSearchRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(min_length=1)


class RankedResultModel(BaseModel):
    type: str
    id: str
    title: str
    snippet: str
    score: float
    kind: Literal["plain", "contextual"]
    created_at: datetime
    attrs: dict = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, result: RankedResult) -> RankedResultModel:
        return cls(
            type=result.item.type.value,
            id=result.item.id,
            title=result.item.title,
            snippet=result.snippet,
            score=round(result.score, 4),
            kind=result.kind.value,
            created_at=result.item.created_at,
            attrs=dict(result.item.attrs),
        )


class SearchResponse(BaseModel):
    results: list[RankedResultModel]
    total_results: int
    search_time_ms: float
    suggestions: list[str]
    failed_sources: list[str] = Field(default_factory=list)
    timed_out_sources: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, outcome: SearchOutcome) -> SearchResponse:
        return cls(
            results=[RankedResultModel.from_domain(r) for r in outcome.results],
            total_results=outcome.total_results,
            search_time_ms=outcome.search_time_ms,
            suggestions=outcome.suggestions,
            failed_sources=outcome.failed_sources,
            timed_out_sources=outcome.timed_out_sources,
        )


class CreateSessionRequest(BaseModel):
    user_id: str = Field(min_length=1)
    title: str | None = None


class MessageRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(min_length=1)
    context: ContextModel | None = None


class MessageModel(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime
    sources: list[RankedResultModel] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, message: ChatMessage) -> MessageModel:
        return cls(
            id=message.id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            sources=[RankedResultModel.from_domain(r) for r in message.sources],
            metadata=message.metadata,
        )


class SessionResponse(BaseModel):
    id: str
    user_id: str
    title: str
    state: Literal["created", "active", "deleted"]
    created_at: datetime
    updated_at: datetime
    messages: list[MessageModel] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, session: ChatSession) -> SessionResponse:
        return cls(
            id=session.id,
            user_id=session.user_id,
            title=session.title,
            state=session.state.value,
            created_at=session.created_at,
            updated_at=session.updated_at,
            messages=[MessageModel.from_domain(m) for m in session.messages],
        )


class HealthResponse(BaseModel):
    status: str
    sources: list[str]
    cache_entries: int
