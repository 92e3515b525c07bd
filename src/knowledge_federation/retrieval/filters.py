"""Adapter selection and per-adapter filter derivation from intents."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time, timedelta

from knowledge_federation.config.constants import (
    BACKLOG_STATUSES,
    DATED_SOURCES,
    GENERAL_SEGMENT,
    PRIORITISED_SOURCES,
    SEGMENT_SOURCES,
    STATUSED_SOURCES,
    URGENT_PRIORITIES,
)
from knowledge_federation.config.settings import Settings
from knowledge_federation.models.domain import (
    AdapterFilter,
    ChatContext,
    IntentTag,
    SourceType,
)
from knowledge_federation.protocols.source_adapter import SourceAdapter


def segment_sources(segment: str | None) -> frozenset[SourceType] | None:
    """Source types a segment hint narrows to, or None for no narrowing."""
    if not segment or segment == GENERAL_SEGMENT:
        return None
    return SEGMENT_SOURCES.get(segment)


def select_adapters(
    adapters: list[SourceAdapter], context: ChatContext | None
) -> list[SourceAdapter]:
    allowed = segment_sources(context.segment if context else None)
    if allowed is None:
        return list(adapters)
    narrowed = [a for a in adapters if a.source_type in allowed]
    return narrowed or list(adapters)


def build_filter(
    intents: list[IntentTag],
    context: ChatContext | None,
    now: datetime,
    settings: Settings,
) -> AdapterFilter:
    """Derive the base filter for a query. Explicit context filters win field by field."""
    tags = set(intents)
    date_from: datetime | None = None
    date_to: datetime | None = None

    if IntentTag.CURRENT in tags:
        day_start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
        date_from, date_to = day_start, day_start + timedelta(days=1)
    elif IntentTag.UPCOMING in tags:
        date_from, date_to = now, now + timedelta(days=settings.upcoming_window_days)
    elif IntentTag.RECENT in tags:
        date_from, date_to = now - timedelta(days=settings.recent_window_days), now
    elif IntentTag.WEEKLY in tags:
        date_from, date_to = now - timedelta(days=settings.weekly_window_days), now

    priority = URGENT_PRIORITIES if IntentTag.URGENT in tags else None
    status = BACKLOG_STATUSES if IntentTag.BACKLOG in tags else None

    derived = AdapterFilter(
        date_from=date_from, date_to=date_to, priority=priority, status=status
    )

    explicit = context.filters if context else None
    if explicit is None:
        return derived
    return AdapterFilter(
        date_from=explicit.date_from or derived.date_from,
        date_to=explicit.date_to or derived.date_to,
        priority=explicit.priority or derived.priority,
        status=explicit.status or derived.status,
    )


def filter_for_source(base: AdapterFilter, source_type: SourceType) -> AdapterFilter | None:
    """Keep only the filter fields the source type carries."""
    scoped = base
    if source_type not in DATED_SOURCES:
        scoped = replace(scoped, date_from=None, date_to=None)
    if source_type not in PRIORITISED_SOURCES:
        scoped = replace(scoped, priority=None)
    if source_type not in STATUSED_SOURCES:
        scoped = replace(scoped, status=None)
    return None if scoped.is_empty else scoped
