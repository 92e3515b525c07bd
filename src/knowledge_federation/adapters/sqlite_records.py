"""Read-only source adapter over the local SQLite records table."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import aiosqlite

from knowledge_federation.exceptions import AdapterError
from knowledge_federation.models.domain import AdapterFilter, CandidateItem, SourceType
from knowledge_federation.scoring.relevance import query_words
from knowledge_federation.storage.migrations import initialize_records_db


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _to_utc_iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


class SQLiteRecordAdapter:
    """Searches one ``source_type`` partition of the records table.

    Matches the full query or any query word against title and text,
    newest records first, at most ``limit`` rows.
    """

    def __init__(
        self,
        db_path: str,
        source_type: SourceType,
        name: str | None = None,
        limit: int = 25,
    ) -> None:
        self._db_path = db_path
        self.source_type = source_type
        self.name = name or f"sqlite:{source_type.value}"
        self._limit = limit

    async def search(
        self, query: str, filter: AdapterFilter | None = None
    ) -> list[CandidateItem]:
        q = query.strip().lower()
        if not q:
            return []

        terms = [q] + [w for w in query_words(q) if w != q]
        where = ["source_type = ?"]
        params: list = [self.source_type.value]

        text_clauses = []
        for term in terms:
            text_clauses.append(
                "(LOWER(title) LIKE ? ESCAPE '\\' OR LOWER(text) LIKE ? ESCAPE '\\')"
            )
            pattern = _like_pattern(term)
            params.extend([pattern, pattern])
        where.append("(" + " OR ".join(text_clauses) + ")")

        if filter is not None:
            if filter.date_from is not None:
                where.append("created_at >= ?")
                params.append(_to_utc_iso(filter.date_from))
            if filter.date_to is not None:
                where.append("created_at <= ?")
                params.append(_to_utc_iso(filter.date_to))
            if filter.priority:
                where.append(f"priority IN ({', '.join('?' * len(filter.priority))})")
                params.extend(filter.priority)
            if filter.status:
                where.append(f"status IN ({', '.join('?' * len(filter.status))})")
                params.extend(filter.status)

        sql = (
            "SELECT * FROM records WHERE "
            + " AND ".join(where)
            + " ORDER BY created_at DESC, record_id LIMIT ?"
        )
        params.append(self._limit)

        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(sql, params) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise AdapterError(self.name, str(e)) from e

        return [self._row_to_item(row) for row in rows]

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> CandidateItem:
        attrs = json.loads(row["attrs"]) if row["attrs"] else {}
        if row["priority"] is not None:
            attrs["priority"] = row["priority"]
        if row["status"] is not None:
            attrs["status"] = row["status"]
        return CandidateItem(
            type=SourceType(row["source_type"]),
            id=row["record_id"],
            title=row["title"],
            text=row["text"],
            created_at=datetime.fromisoformat(row["created_at"]),
            attrs=attrs,
        )


async def save_records(db_path: str, items: list[CandidateItem]) -> int:
    """Insert or replace records; priority and status are lifted out of attrs."""
    await initialize_records_db(db_path)
    async with aiosqlite.connect(db_path) as db:
        await db.executemany(
            "INSERT OR REPLACE INTO records "
            "(source_type, record_id, title, text, created_at, priority, status, attrs) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (
                    item.type.value,
                    item.id,
                    item.title,
                    item.text,
                    _to_utc_iso(item.created_at),
                    item.attrs.get("priority"),
                    item.attrs.get("status"),
                    json.dumps(
                        {k: v for k, v in item.attrs.items() if k not in ("priority", "status")},
                        default=str,
                    ),
                )
                for item in items
            ],
        )
        await db.commit()
    return len(items)
