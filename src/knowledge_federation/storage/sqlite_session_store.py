"""SQLite-backed conversation session store."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from knowledge_federation.exceptions import (
    PersistenceError,
    SessionDeletedError,
    SessionNotFoundError,
)
from knowledge_federation.models.domain import (
    CandidateItem,
    ChatMessage,
    ChatSession,
    RankedResult,
    ScoreKind,
    SessionState,
    SourceType,
    utc_now,
)
from knowledge_federation.observability.logger import get_logger
from knowledge_federation.storage.migrations import initialize_session_db

logger = get_logger("session_store")


class SQLiteSessionStore:
    """Append-only session log.

    Lifecycle: created -> active (first append) -> active again after a
    clear -> deleted. Deleted sessions are kept as tombstones so that any
    later operation fails with SessionDeletedError instead of looking like
    an unknown id.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        try:
            await initialize_session_db(self._db_path)
        except aiosqlite.Error as e:
            raise PersistenceError(f"initialize failed: {e}") from e

    async def create_session(self, user_id: str, title: str | None = None) -> ChatSession:
        now = utc_now()
        session = ChatSession(
            id=f"chat_{uuid4().hex}",
            user_id=user_id,
            title=title or f"Chat {now.date().isoformat()}",
            messages=[],
            created_at=now,
            updated_at=now,
            state=SessionState.CREATED,
        )
        async with self._connect("create_session") as db:
            await db.execute(
                "INSERT INTO sessions (session_id, user_id, title, state, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    session.id,
                    session.user_id,
                    session.title,
                    session.state.value,
                    session.created_at.isoformat(),
                    session.updated_at.isoformat(),
                ),
            )
            await db.commit()
        logger.info("session_created", session_id=session.id, user_id=user_id)
        return session

    async def append_message(self, session_id: str, message: ChatMessage) -> None:
        async with self._connect("append_message") as db:
            await db.execute("BEGIN IMMEDIATE")
            await self._require_live(db, session_id)

            async with db.execute(
                "SELECT seq, timestamp FROM messages WHERE session_id = ? "
                "ORDER BY seq DESC LIMIT 1",
                (session_id,),
            ) as cursor:
                last = await cursor.fetchone()

            if last is not None and _parse_ts(last["timestamp"]) > message.timestamp:
                await db.rollback()
                raise PersistenceError(
                    f"message {message.id} is older than the last message in {session_id}"
                )
            seq = last["seq"] + 1 if last is not None else 0

            await db.execute(
                "INSERT INTO messages "
                "(session_id, seq, message_id, role, content, timestamp, sources, metadata) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    session_id,
                    seq,
                    message.id,
                    message.role,
                    message.content,
                    message.timestamp.isoformat(),
                    json.dumps([result_to_dict(r) for r in message.sources], default=str),
                    json.dumps(message.metadata, default=str),
                ),
            )
            await db.execute(
                "UPDATE sessions SET state = ?, updated_at = ? WHERE session_id = ?",
                (SessionState.ACTIVE.value, utc_now().isoformat(), session_id),
            )
            await db.commit()

    async def list_sessions(self, user_id: str) -> list[ChatSession]:
        async with self._connect("list_sessions") as db:
            async with db.execute(
                "SELECT * FROM sessions WHERE user_id = ? AND state != ? "
                "ORDER BY updated_at DESC",
                (user_id, SessionState.DELETED.value),
            ) as cursor:
                rows = await cursor.fetchall()
            return [
                self._row_to_session(row, await self._load_messages(db, row["session_id"]))
                for row in rows
            ]

    async def get_session(self, session_id: str) -> ChatSession:
        async with self._connect("get_session") as db:
            row = await self._require_live(db, session_id)
            return self._row_to_session(row, await self._load_messages(db, session_id))

    async def clear_session(self, session_id: str) -> None:
        async with self._connect("clear_session") as db:
            await self._require_live(db, session_id)
            await db.execute("DELETE FROM messages WHERE session_id = ?", (session_id,))
            await db.execute(
                "UPDATE sessions SET updated_at = ? WHERE session_id = ?",
                (utc_now().isoformat(), session_id),
            )
            await db.commit()
        logger.info("session_cleared", session_id=session_id)

    async def delete_session(self, session_id: str) -> None:
        async with self._connect("delete_session") as db:
            await self._require_live(db, session_id)
            await db.execute("DELETE FROM messages WHERE session_id = ?", (session_id,))
            await db.execute(
                "UPDATE sessions SET state = ?, updated_at = ? WHERE session_id = ?",
                (SessionState.DELETED.value, utc_now().isoformat(), session_id),
            )
            await db.commit()
        logger.info("session_deleted", session_id=session_id)

    @asynccontextmanager
    async def _connect(self, operation: str):
        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as e:
            logger.error("session_store_failed", operation=operation, error=str(e))
            raise PersistenceError(f"{operation} failed: {e}") from e

    @staticmethod
    async def _require_live(db: aiosqlite.Connection, session_id: str) -> aiosqlite.Row:
        async with db.execute(
            "SELECT * FROM sessions WHERE session_id = ?", (session_id,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            raise SessionNotFoundError(f"session {session_id} not found")
        if row["state"] == SessionState.DELETED.value:
            raise SessionDeletedError(f"session {session_id} was deleted")
        return row

    @staticmethod
    async def _load_messages(db: aiosqlite.Connection, session_id: str) -> list[ChatMessage]:
        async with db.execute(
            "SELECT * FROM messages WHERE session_id = ? ORDER BY seq", (session_id,)
        ) as cursor:
            rows = await cursor.fetchall()
        return [
            ChatMessage(
                id=row["message_id"],
                role=row["role"],
                content=row["content"],
                timestamp=_parse_ts(row["timestamp"]),
                sources=[result_from_dict(d) for d in json.loads(row["sources"])],
                metadata=json.loads(row["metadata"]),
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_session(row: aiosqlite.Row, messages: list[ChatMessage]) -> ChatSession:
        return ChatSession(
            id=row["session_id"],
            user_id=row["user_id"],
            title=row["title"],
            messages=messages,
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
            state=SessionState(row["state"]),
        )


def result_to_dict(result: RankedResult) -> dict:
    item = result.item
    return {
        "type": item.type.value,
        "id": item.id,
        "title": item.title,
        "text": item.text,
        "created_at": item.created_at.isoformat(),
        "attrs": dict(item.attrs),
        "score": result.score,
        "kind": result.kind.value,
        "snippet": result.snippet,
    }


def result_from_dict(data: dict) -> RankedResult:
    return RankedResult(
        item=CandidateItem(
            type=SourceType(data["type"]),
            id=data["id"],
            title=data["title"],
            text=data.get("text", ""),
            created_at=_parse_ts(data["created_at"]),
            attrs=data.get("attrs", {}),
        ),
        score=data["score"],
        kind=ScoreKind(data.get("kind", ScoreKind.CONTEXTUAL.value)),
        snippet=data.get("snippet", ""),
    )


def _parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts
