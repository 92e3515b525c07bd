"""Bounded, time-keyed cache for fan-out results.

Owned by the caller and passed into the pipeline; entries expire after
``ttl_seconds`` and the least recently used entry is evicted once
``max_entries`` is reached.
"""

from __future__ import annotations

import hashlib
import json
import time
from collections import OrderedDict
from collections.abc import Callable

from knowledge_federation.models.domain import ChatContext, FanOutResult


class ContextCache:
    def __init__(
        self,
        max_entries: int = 256,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, FanOutResult]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, query: str, context: ChatContext | None) -> FanOutResult | None:
        key = self.make_key(query, context)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at > self._ttl:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def put(self, query: str, context: ChatContext | None, value: FanOutResult) -> None:
        key = self.make_key(query, context)
        self._entries[key] = (self._clock(), value)
        self._entries.move_to_end(key)
        self._evict()

    def clear(self) -> None:
        self._entries.clear()

    def _evict(self) -> None:
        now = self._clock()
        expired = [k for k, (at, _) in self._entries.items() if now - at > self._ttl]
        for k in expired:
            del self._entries[k]
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    @staticmethod
    def make_key(query: str, context: ChatContext | None) -> str:
        filters = context.filters if context else None
        payload = {
            "q": query.strip().lower(),
            "segment": context.segment if context else None,
            "filters": None
            if filters is None
            else {
                "date_from": filters.date_from.isoformat() if filters.date_from else None,
                "date_to": filters.date_to.isoformat() if filters.date_to else None,
                "priority": list(filters.priority or ()),
                "status": list(filters.status or ()),
            },
        }
        raw = json.dumps(payload, sort_keys=True)
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()
