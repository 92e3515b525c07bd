"""Per-query stage timing with named spans."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from uuid import uuid4


@dataclass
class Span:
    name: str
    start_ms: float
    end_ms: float = 0.0
    metadata: dict = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms


class TraceContext:
    """Collects spans for one pipeline call.

    Spans are recorded even when the stage raises, so a cancelled or failed
    query still reports how far it got.
    """

    def __init__(self, trace_id: str | None = None) -> None:
        self.trace_id = trace_id or uuid4().hex
        self.spans: list[Span] = []
        self._start = time.monotonic()

    @contextmanager
    def span(self, name: str, **metadata):
        s = Span(name=name, start_ms=self.elapsed_ms, metadata=metadata)
        try:
            yield s
        finally:
            s.end_ms = self.elapsed_ms
            self.spans.append(s)

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self._start) * 1000

    def stage_durations(self) -> dict[str, float]:
        return {s.name: round(s.duration_ms, 2) for s in self.spans}

