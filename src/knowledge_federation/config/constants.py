"""Static vocabularies: intent keywords, segments, and fixed messages."""

from __future__ import annotations

from knowledge_federation.models.domain import IntentTag, SourceType

# Order matters: classify_intent emits tags in this order.
INTENT_KEYWORDS: dict[IntentTag, tuple[str, ...]] = {
    # Time-based
    IntentTag.CURRENT: ("today", "now", "current"),
    IntentTag.UPCOMING: ("tomorrow", "next", "upcoming"),
    IntentTag.RECENT: ("yesterday", "last", "recent"),
    IntentTag.WEEKLY: ("this week", "weekly"),
    # Action-based
    IntentTag.PLANNING: ("plan", "planning", "schedule"),
    IntentTag.REVIEW: ("review", "summary", "report"),
    IntentTag.CREATE: ("create", "add", "new"),
    IntentTag.UPDATE: ("update", "change", "modify"),
    # Priority-based
    IntentTag.URGENT: ("urgent", "critical", "important"),
    IntentTag.BACKLOG: ("backlog", "todo", "pending"),
    # Entity-based
    IntentTag.MEETINGS: ("meeting", "standup", "discussion"),
    IntentTag.NOTES: ("note", "document", "knowledge"),
    IntentTag.PRIORITIES: ("task", "priority", "feature"),
    IntentTag.STAKEHOLDERS: ("stakeholder", "team", "person"),
}

SEGMENT_SOURCES: dict[str, frozenset[SourceType]] = {
    "notes": frozenset({SourceType.NOTE, SourceType.DOCUMENT}),
    "knowledge": frozenset({SourceType.DOCUMENT, SourceType.NOTE}),
    "meetings": frozenset({SourceType.MEETING, SourceType.CALENDAR}),
    "calendar": frozenset({SourceType.CALENDAR, SourceType.MEETING}),
    "priorities": frozenset({SourceType.PRIORITY}),
    "stakeholders": frozenset({SourceType.STAKEHOLDER}),
    "emails": frozenset({SourceType.EMAIL}),
    "market": frozenset({SourceType.MARKET}),
}

GENERAL_SEGMENT = "general"

# Which derived filter fields each source type honours.
DATED_SOURCES = frozenset(SourceType) - {SourceType.STAKEHOLDER}
PRIORITISED_SOURCES = frozenset({SourceType.PRIORITY, SourceType.EMAIL})
STATUSED_SOURCES = frozenset({SourceType.PRIORITY, SourceType.MEETING})

URGENT_PRIORITIES = ("high", "critical")
BACKLOG_STATUSES = ("backlog", "pending", "in-progress")
ACTIVE_STATUSES = frozenset({"in-progress", "scheduled"})

TYPE_PLURALS: dict[SourceType, str] = {
    SourceType.NOTE: "notes",
    SourceType.MEETING: "meetings",
    SourceType.PRIORITY: "priorities",
    SourceType.STAKEHOLDER: "stakeholders",
    SourceType.EMAIL: "emails",
    SourceType.MARKET: "market items",
    SourceType.CALENDAR: "calendar events",
    SourceType.DOCUMENT: "documents",
}

TYPE_SINGULARS: dict[SourceType, str] = {
    SourceType.NOTE: "note",
    SourceType.MEETING: "meeting",
    SourceType.PRIORITY: "priority",
    SourceType.STAKEHOLDER: "stakeholder",
    SourceType.EMAIL: "email",
    SourceType.MARKET: "market item",
    SourceType.CALENDAR: "calendar event",
    SourceType.DOCUMENT: "document",
}

APOLOGY_MESSAGE = (
    "I'm having trouble reaching the assistant service right now. "
    "Your message has been saved; please try again in a moment."
)

ELLIPSIS = "..."

SUGGESTION_MIN_WORD_LENGTH = 4
