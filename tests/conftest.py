"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from knowledge_federation.config.settings import Settings
from knowledge_federation.models.domain import CandidateItem, SourceType

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    """Test settings with temp paths."""
    tmp = tempfile.mkdtemp()
    return Settings(
        google_api_key="test-key",
        sqlite_session_db_path=str(Path(tmp) / "test_sessions.db"),
        sqlite_records_db_path=str(Path(tmp) / "test_records.db"),
        fan_out_deadline_ms=500,
    )


def make_item(
    type: SourceType = SourceType.NOTE,
    id: str = "1",
    title: str = "Untitled",
    text: str = "",
    age: timedelta = timedelta(days=60),
    **attrs,
) -> CandidateItem:
    return CandidateItem(
        type=type,
        id=id,
        title=title,
        text=text,
        created_at=NOW - age,
        attrs=attrs,
    )


@pytest.fixture
def sample_items():
    """A small mixed-type workspace."""
    return [
        make_item(
            SourceType.NOTE,
            "n1",
            "Sprint retro",
            "The team reviewed the release checklist and the sprint goals.",
            timedelta(hours=3),
        ),
        make_item(
            SourceType.MEETING,
            "m1",
            "Stakeholder sync",
            "Discussed the roadmap with finance stakeholders.",
            timedelta(days=2),
            status="scheduled",
        ),
        make_item(
            SourceType.PRIORITY,
            "p1",
            "Payment retry bug",
            "Customers are charged twice when the retry fires.",
            timedelta(days=10),
            priority="critical",
            status="in-progress",
        ),
        make_item(
            SourceType.STAKEHOLDER,
            "s1",
            "Dana Whitfield",
            "VP Finance, owns the monthly close.",
            timedelta(days=90),
        ),
    ]


@pytest.fixture
def tmp_dir():
    """Create a temporary directory."""
    return tempfile.mkdtemp()
