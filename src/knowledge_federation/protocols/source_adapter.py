"""Protocol for domain source adapters."""

from __future__ import annotations

from typing import Protocol

from knowledge_federation.models.domain import AdapterFilter, CandidateItem, SourceType


class SourceAdapter(Protocol):
    name: str
    source_type: SourceType

    async def search(
        self, query: str, filter: AdapterFilter | None = None
    ) -> list[CandidateItem]:
        """Return at most the adapter's own limit of matching items."""
        ...
