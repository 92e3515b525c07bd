"""Read-only source adapter over a PostgREST endpoint."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from knowledge_federation.exceptions import AdapterError
from knowledge_federation.models.domain import AdapterFilter, CandidateItem, SourceType
from knowledge_federation.scoring.relevance import query_words


@dataclass(frozen=True)
class FieldMap:
    """Column names of one hosted table."""

    table: str
    title: str = "title"
    text: str = "content"
    id: str = "id"
    created_at: str = "created_at"
    priority: str | None = None
    status: str | None = None


DEFAULT_FIELD_MAPS: dict[SourceType, FieldMap] = {
    SourceType.NOTE: FieldMap(table="notes"),
    SourceType.MEETING: FieldMap(
        table="meetings", text="description", created_at="date", status="status"
    ),
    SourceType.PRIORITY: FieldMap(
        table="priorities", text="description", priority="priority", status="status"
    ),
    SourceType.STAKEHOLDER: FieldMap(table="stakeholders", title="name", text="notes"),
    SourceType.EMAIL: FieldMap(
        table="emails", title="subject", text="body", created_at="received_at", priority="priority"
    ),
    SourceType.MARKET: FieldMap(table="market_intelligence"),
    SourceType.CALENDAR: FieldMap(
        table="calendar_events", text="description", created_at="start_time"
    ),
    SourceType.DOCUMENT: FieldMap(table="documents"),
}

# Characters with meaning inside a PostgREST logic tree.
_RESERVED = re.compile(r"[*(),.\"\\:]")


def _ilike_term(term: str) -> str:
    return _RESERVED.sub(" ", term).strip()


def _iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def _parse_created(value) -> datetime:
    if not value:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class RestRecordAdapter:
    """Searches one hosted table through a shared ``httpx.AsyncClient``.

    The client carries the base url and auth headers; the adapter only
    builds the query string for its table and maps rows back.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        source_type: SourceType,
        fields: FieldMap | None = None,
        name: str | None = None,
        limit: int = 25,
    ) -> None:
        self._client = client
        self.source_type = source_type
        self._fields = fields or DEFAULT_FIELD_MAPS[source_type]
        self.name = name or f"rest:{self._fields.table}"
        self._limit = limit

    def build_params(self, query: str, filter: AdapterFilter | None) -> list[tuple[str, str]]:
        f = self._fields
        terms = [t for t in (_ilike_term(w) for w in [query] + query_words(query)) if t]
        terms = list(dict.fromkeys(terms))
        conditions = []
        for term in terms:
            conditions.append(f'{f.title}.ilike."*{term}*"')
            conditions.append(f'{f.text}.ilike."*{term}*"')

        params = [
            ("select", "*"),
            ("or", "(" + ",".join(conditions) + ")"),
            ("order", f"{f.created_at}.desc"),
            ("limit", str(self._limit)),
        ]
        if filter is not None:
            if filter.date_from is not None:
                params.append((f.created_at, f"gte.{_iso(filter.date_from)}"))
            if filter.date_to is not None:
                params.append((f.created_at, f"lte.{_iso(filter.date_to)}"))
            if filter.priority and f.priority:
                params.append((f.priority, f"in.({','.join(filter.priority)})"))
            if filter.status and f.status:
                params.append((f.status, f"in.({','.join(filter.status)})"))
        return params

    async def search(
        self, query: str, filter: AdapterFilter | None = None
    ) -> list[CandidateItem]:
        if not _ilike_term(query):
            return []
        try:
            response = await self._client.get(
                f"/{self._fields.table}", params=self.build_params(query, filter)
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            raise AdapterError(self.name, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise AdapterError(self.name, str(e)) from e

        if not isinstance(rows, list):
            raise AdapterError(self.name, "unexpected response shape")
        return [self._row_to_item(row) for row in rows[: self._limit]]

    def _row_to_item(self, row: dict) -> CandidateItem:
        f = self._fields
        mapped = {f.id, f.title, f.text, f.created_at}
        attrs = {k: v for k, v in row.items() if k not in mapped and v is not None}
        if f.priority and row.get(f.priority) is not None:
            attrs["priority"] = row[f.priority]
        if f.status and row.get(f.status) is not None:
            attrs["status"] = row[f.status]
        return CandidateItem(
            type=self.source_type,
            id=str(row[f.id]),
            title=str(row.get(f.title) or ""),
            text=str(row.get(f.text) or ""),
            created_at=_parse_created(row.get(f.created_at)),
            attrs=attrs,
        )


def build_rest_client(base_url: str, api_key: str, timeout_seconds: float) -> httpx.AsyncClient:
    headers = {"Accept": "application/json"}
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=headers,
        timeout=httpx.Timeout(timeout_seconds),
    )
