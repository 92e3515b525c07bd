"""Protocol for the external text-generation step."""

from __future__ import annotations

from typing import Protocol

from knowledge_federation.models.domain import ChatContext, ChatMessage, ContextBundle


class Generator(Protocol):
    async def generate(
        self,
        bundle: ContextBundle,
        history: list[ChatMessage],
        query: str,
        context: ChatContext | None = None,
    ) -> str: ...
