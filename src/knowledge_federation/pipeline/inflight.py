"""Per-session cancellation tokens for superseded queries."""

from __future__ import annotations

import asyncio

from knowledge_federation.observability.logger import get_logger

logger = get_logger("inflight")


class InFlightRegistry:
    """Tracks the in-flight query token for each session.

    ``begin`` sets the previous token for the session, which makes the stale
    fan-out raise QueryCancelled, and hands out a fresh one.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, asyncio.Event] = {}

    def begin(self, session_id: str) -> asyncio.Event:
        previous = self._tokens.get(session_id)
        if previous is not None and not previous.is_set():
            previous.set()
            logger.info("query_superseded", session_id=session_id)
        token = asyncio.Event()
        self._tokens[session_id] = token
        return token

    def finish(self, session_id: str, token: asyncio.Event) -> None:
        # A newer query may already own the slot.
        if self._tokens.get(session_id) is token:
            del self._tokens[session_id]

    def __len__(self) -> int:
        return len(self._tokens)
