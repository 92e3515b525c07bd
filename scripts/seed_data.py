"""Seed the local record store with sample workspace records for development."""

from __future__ import annotations

import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from knowledge_federation.adapters.sqlite_records import save_records
from knowledge_federation.config.settings import Settings
from knowledge_federation.models.domain import CandidateItem, SourceType, utc_now


def sample_records() -> list[CandidateItem]:
    now = utc_now()
    return [
        CandidateItem(
            type=SourceType.NOTE,
            id="note-1",
            title="Sprint 14 retrospective notes",
            text=(
                "The team agreed the release checklist slowed us down. Action items: "
                "automate the changelog, move the demo to Thursday, and review the "
                "onboarding flow with design before planning."
            ),
            created_at=now - timedelta(hours=5),
            attrs={"tags": ["retro", "sprint-14"]},
        ),
        CandidateItem(
            type=SourceType.NOTE,
            id="note-2",
            title="Checkout redesign research",
            text=(
                "Interviews with eight customers show the coupon field is the main "
                "source of drop-off. Recommendation: collapse it behind a link."
            ),
            created_at=now - timedelta(days=12),
            attrs={"tags": ["research", "checkout"]},
        ),
        CandidateItem(
            type=SourceType.MEETING,
            id="meeting-1",
            title="Daily standup",
            text="Blockers: payment sandbox outage. Alex to follow up with the vendor.",
            created_at=now - timedelta(hours=2),
            attrs={"status": "completed"},
        ),
        CandidateItem(
            type=SourceType.MEETING,
            id="meeting-2",
            title="PI planning prep with stakeholders",
            text="Walk through the roadmap draft and the dependency board before PI planning.",
            created_at=now + timedelta(days=2),
            attrs={"status": "scheduled"},
        ),
        CandidateItem(
            type=SourceType.PRIORITY,
            id="priority-1",
            title="Fix payment retry bug",
            text="Customers are charged twice when the retry fires after a timeout.",
            created_at=now - timedelta(days=1),
            attrs={"priority": "critical", "status": "in-progress", "urgency": 9},
        ),
        CandidateItem(
            type=SourceType.PRIORITY,
            id="priority-2",
            title="Add CSV export to reports",
            text="Requested by finance for the monthly close.",
            created_at=now - timedelta(days=20),
            attrs={"priority": "medium", "status": "backlog", "urgency": 4},
        ),
        CandidateItem(
            type=SourceType.STAKEHOLDER,
            id="stakeholder-1",
            title="Dana Whitfield",
            text="VP Finance. Cares about the CSV export and the monthly close timeline.",
            created_at=now - timedelta(days=40),
            attrs={"role": "VP Finance", "influence": "high"},
        ),
        CandidateItem(
            type=SourceType.EMAIL,
            id="email-1",
            title="Re: payment retry incident",
            text="Support is seeing a spike in duplicate charge tickets since Monday.",
            created_at=now - timedelta(hours=20),
            attrs={"priority": "high", "sender": "support@example.com"},
        ),
        CandidateItem(
            type=SourceType.MARKET,
            id="market-1",
            title="Competitor launches one-click checkout",
            text="The launch targets mid-market retailers and bundles fraud screening.",
            created_at=now - timedelta(days=3),
            attrs={"source": "newsfeed"},
        ),
        CandidateItem(
            type=SourceType.CALENDAR,
            id="calendar-1",
            title="Sprint review",
            text="Demo the checkout changes and the payment retry fix.",
            created_at=now + timedelta(days=4),
            attrs={},
        ),
    ]


async def seed(db_path: str) -> None:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    count = await save_records(db_path, sample_records())
    print(f"Seeded {count} records into {db_path}")


def main() -> None:
    settings = Settings()
    asyncio.run(seed(settings.sqlite_records_db_path))


if __name__ == "__main__":
    main()
