"""Integration tests for the SQLite and REST record adapters."""

import json
import tempfile
from datetime import timedelta
from pathlib import Path

import httpx
import pytest

from conftest import NOW, make_item
from knowledge_federation.adapters.rest_records import RestRecordAdapter
from knowledge_federation.adapters.sqlite_records import SQLiteRecordAdapter, save_records
from knowledge_federation.exceptions import AdapterError
from knowledge_federation.models.domain import AdapterFilter, SourceType


@pytest.fixture
async def records_db():
    tmp = tempfile.mkdtemp()
    path = str(Path(tmp) / "records.db")
    await save_records(
        path,
        [
            make_item(
                SourceType.PRIORITY, "p1", "Fix payment retry", "double charge",
                timedelta(days=1), priority="critical", status="in-progress",
            ),
            make_item(
                SourceType.PRIORITY, "p2", "CSV export", "finance wants payment exports",
                timedelta(days=20), priority="low", status="backlog",
            ),
            make_item(
                SourceType.NOTE, "n1", "Payment research", "100% of users hate the coupon_field",
                timedelta(hours=2), tags=["research"],
            ),
            make_item(SourceType.NOTE, "n2", "Retro", "nothing relevant", timedelta(days=3)),
        ],
    )
    return path


async def test_search_matches_title_or_text(records_db):
    adapter = SQLiteRecordAdapter(records_db, SourceType.PRIORITY)
    items = await adapter.search("payment")
    assert [i.id for i in items] == ["p1", "p2"]
    assert items[0].attrs["priority"] == "critical"
    assert items[0].attrs["status"] == "in-progress"


async def test_search_is_partitioned_by_type(records_db):
    adapter = SQLiteRecordAdapter(records_db, SourceType.NOTE)
    items = await adapter.search("payment")
    assert [i.id for i in items] == ["n1"]
    assert items[0].attrs["tags"] == ["research"]
    assert adapter.name == "sqlite:note"


async def test_any_query_word_matches(records_db):
    adapter = SQLiteRecordAdapter(records_db, SourceType.PRIORITY)
    items = await adapter.search("export backlog")
    assert [i.id for i in items] == ["p2"]


async def test_like_wildcards_are_literal(records_db):
    adapter = SQLiteRecordAdapter(records_db, SourceType.NOTE)
    assert [i.id for i in await adapter.search("100%")] == ["n1"]
    assert [i.id for i in await adapter.search("coupon_field")] == ["n1"]
    assert await adapter.search("coupon%field") == []


async def test_priority_and_status_filters(records_db):
    adapter = SQLiteRecordAdapter(records_db, SourceType.PRIORITY)
    urgent = await adapter.search("payment", AdapterFilter(priority=("high", "critical")))
    assert [i.id for i in urgent] == ["p1"]
    backlog = await adapter.search("payment", AdapterFilter(status=("backlog",)))
    assert [i.id for i in backlog] == ["p2"]


async def test_date_window_filter(records_db):
    adapter = SQLiteRecordAdapter(records_db, SourceType.PRIORITY)
    recent = AdapterFilter(date_from=NOW - timedelta(days=7), date_to=NOW)
    assert [i.id for i in await adapter.search("payment", recent)] == ["p1"]


async def test_limit_and_blank_query(records_db):
    adapter = SQLiteRecordAdapter(records_db, SourceType.PRIORITY, limit=1)
    assert len(await adapter.search("payment")) == 1
    assert await adapter.search("   ") == []


async def test_missing_table_raises_adapter_error(tmp_dir):
    adapter = SQLiteRecordAdapter(str(Path(tmp_dir) / "empty.db"), SourceType.NOTE)
    with pytest.raises(AdapterError):
        await adapter.search("anything")


def _rest_adapter(handler, source_type=SourceType.PRIORITY):
    client = httpx.AsyncClient(
        base_url="https://db.example.com/rest/v1", transport=httpx.MockTransport(handler)
    )
    return RestRecordAdapter(client, source_type, limit=5)


async def test_rest_search_builds_query_and_maps_rows():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = request.url.params
        rows = [
            {
                "id": 42,
                "title": "Fix payment retry",
                "description": "double charge",
                "created_at": "2024-05-14T09:00:00Z",
                "priority": "critical",
                "status": "in-progress",
                "owner": "alex",
                "due_date": None,
            }
        ]
        return httpx.Response(200, content=json.dumps(rows))

    adapter = _rest_adapter(handler)
    items = await adapter.search(
        "payment retry", AdapterFilter(priority=("high", "critical"), date_from=NOW)
    )

    assert seen["path"] == "/rest/v1/priorities"
    params = seen["params"]
    assert params["limit"] == "5"
    assert params["order"] == "created_at.desc"
    assert 'title.ilike."*payment retry*"' in params["or"]
    assert 'description.ilike."*retry*"' in params["or"]
    assert params["priority"] == "in.(high,critical)"
    assert params["created_at"].startswith("gte.2024-05-15")

    assert len(items) == 1
    item = items[0]
    assert item.id == "42"
    assert item.type is SourceType.PRIORITY
    assert item.text == "double charge"
    assert item.created_at.tzinfo is not None
    assert item.attrs == {"priority": "critical", "status": "in-progress", "owner": "alex"}
    assert adapter.name == "rest:priorities"


async def test_rest_strips_reserved_characters():
    adapter = _rest_adapter(lambda r: httpx.Response(200, json=[]))
    params = dict(adapter.build_params('a,b (c) "d"', None))
    assert "," not in params["or"].split('"')[1]
    assert await adapter.search("(),") == []


async def test_rest_http_error_raises_adapter_error():
    adapter = _rest_adapter(lambda r: httpx.Response(500, text="oops"))
    with pytest.raises(AdapterError) as exc:
        await adapter.search("payment")
    assert exc.value.source == "rest:priorities"


async def test_rest_transport_error_raises_adapter_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(AdapterError):
        await _rest_adapter(handler).search("payment")


async def test_rest_unexpected_payload():
    adapter = _rest_adapter(lambda r: httpx.Response(200, json={"message": "nope"}))
    with pytest.raises(AdapterError):
        await adapter.search("payment")
