"""Protocol for conversation session persistence."""

from __future__ import annotations

from typing import Protocol

from knowledge_federation.models.domain import ChatMessage, ChatSession


class SessionStore(Protocol):
    async def create_session(self, user_id: str, title: str | None = None) -> ChatSession: ...

    async def append_message(self, session_id: str, message: ChatMessage) -> None: ...

    async def list_sessions(self, user_id: str) -> list[ChatSession]: ...

    async def get_session(self, session_id: str) -> ChatSession: ...

    async def clear_session(self, session_id: str) -> None: ...

    async def delete_session(self, session_id: str) -> None: ...
