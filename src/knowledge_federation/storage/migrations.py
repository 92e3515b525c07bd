"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS sessions (
    session_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    state TEXT NOT NULL DEFAULT 'created',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

SESSIONS_USER_INDEX = """
CREATE INDEX IF NOT EXISTS idx_sessions_user_id ON sessions(user_id, updated_at)
"""

MESSAGES_TABLE = """
CREATE TABLE IF NOT EXISTS messages (
    session_id TEXT NOT NULL,
    seq INTEGER NOT NULL,
    message_id TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    sources TEXT NOT NULL DEFAULT '[]',
    metadata TEXT NOT NULL DEFAULT '{}',
    PRIMARY KEY (session_id, seq),
    FOREIGN KEY (session_id) REFERENCES sessions(session_id)
)
"""

RECORDS_TABLE = """
CREATE TABLE IF NOT EXISTS records (
    source_type TEXT NOT NULL,
    record_id TEXT NOT NULL,
    title TEXT NOT NULL,
    text TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    priority TEXT,
    status TEXT,
    attrs TEXT NOT NULL DEFAULT '{}',
    PRIMARY KEY (source_type, record_id)
)
"""

RECORDS_CREATED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_records_type_created ON records(source_type, created_at)
"""


async def initialize_session_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(SESSIONS_TABLE)
        await db.execute(SESSIONS_USER_INDEX)
        await db.execute(MESSAGES_TABLE)
        await db.commit()


async def initialize_records_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(RECORDS_TABLE)
        await db.execute(RECORDS_CREATED_INDEX)
        await db.commit()
