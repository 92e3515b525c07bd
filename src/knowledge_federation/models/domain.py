"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class IntentTag(str, Enum):
    CURRENT = "current"
    UPCOMING = "upcoming"
    RECENT = "recent"
    WEEKLY = "weekly"
    PLANNING = "planning"
    REVIEW = "review"
    CREATE = "create"
    UPDATE = "update"
    URGENT = "urgent"
    BACKLOG = "backlog"
    MEETINGS = "meetings"
    NOTES = "notes"
    PRIORITIES = "priorities"
    STAKEHOLDERS = "stakeholders"
    GENERAL = "general"

    def __str__(self) -> str:
        return self.value


class SourceType(str, Enum):
    NOTE = "note"
    MEETING = "meeting"
    PRIORITY = "priority"
    STAKEHOLDER = "stakeholder"
    EMAIL = "email"
    MARKET = "market"
    CALENDAR = "calendar"
    DOCUMENT = "document"

    def __str__(self) -> str:
        return self.value


class SessionState(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    DELETED = "deleted"


class ScoreKind(str, Enum):
    PLAIN = "plain"
    CONTEXTUAL = "contextual"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AdapterFilter:
    date_from: datetime | None = None
    date_to: datetime | None = None
    priority: tuple[str, ...] | None = None
    status: tuple[str, ...] | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.date_from is None
            and self.date_to is None
            and not self.priority
            and not self.status
        )


@dataclass(frozen=True)
class ChatContext:
    segment: str | None = None
    entity_id: str | None = None
    entity_type: str | None = None
    user_role: str | None = None
    filters: AdapterFilter | None = None


@dataclass(frozen=True)
class CandidateItem:
    """A record returned by a source adapter. Immutable once returned."""

    type: SourceType
    id: str
    title: str
    text: str
    created_at: datetime
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))
        if self.created_at.tzinfo is None:
            object.__setattr__(
                self, "created_at", self.created_at.replace(tzinfo=timezone.utc)
            )

    @property
    def key(self) -> tuple[str, str]:
        return (self.type.value, self.id)

    @property
    def searchable_text(self) -> str:
        return f"{self.title} {self.text}"


@dataclass(frozen=True)
class ScoredItem:
    item: CandidateItem
    score: float
    kind: ScoreKind


@dataclass(frozen=True)
class RankedResult:
    item: CandidateItem
    score: float
    kind: ScoreKind
    snippet: str

    @property
    def key(self) -> tuple[str, str]:
        return self.item.key


@dataclass(frozen=True)
class ContextEntry:
    type: SourceType
    title: str
    snippet: str
    recency: str  # "today", "this_week", "this_month", "older"
    score: float


@dataclass
class ContextBundle:
    entries: list[ContextEntry]
    results: list[RankedResult]
    counts: dict[str, int]
    preamble: str


@dataclass
class FanOutResult:
    items: list[CandidateItem]
    failed: list[str] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)


@dataclass
class SearchOutcome:
    results: list[RankedResult]
    total_results: int
    search_time_ms: float
    suggestions: list[str]
    failed_sources: list[str] = field(default_factory=list)
    timed_out_sources: list[str] = field(default_factory=list)


@dataclass
class ChatMessage:
    id: str
    role: str  # "user", "assistant"
    content: str
    timestamp: datetime = field(default_factory=utc_now)
    sources: list[RankedResult] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


@dataclass
class ChatSession:
    id: str
    user_id: str
    title: str
    messages: list[ChatMessage]
    created_at: datetime
    updated_at: datetime
    state: SessionState = SessionState.CREATED
