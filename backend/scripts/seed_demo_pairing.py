"""
Seed a demo pairing: one revealed week with guesses and final scores, plus the
current week sitting in the guessing phase. The documents below use the older
camelCase field names on purpose; they go through the same legacy translation
the storage layer applies on read.

Usage (from repo root):
  cd backend && python scripts/seed_demo_pairing.py
"""
import asyncio
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from innermost.domain.common.types import utcnow
from innermost.domain.willing_box.cycle import finalize_score
from innermost.domain.willing_box.models import WeeklyScore, WillingBox
from innermost.domain.willing_box.phases import settle
from innermost.infra.db.base import Base, create_engine, create_session_factory
from innermost.infra.db.legacy_fields import weekly_score_fields, willing_box_fields
from innermost.infra.db.models.willing_box import WillingBoxModel
from innermost.infra.db.repositories.willing_box_repo import (
    WeeklyScoreRepositoryImpl,
    WillingBoxRepositoryImpl,
)
from innermost.logging_config import configure_logging
from innermost.settings import settings

logger = logging.getLogger(__name__)

DEMO_PAIRING_ID = "demo-pairing"
PARTNER_A = "demo-partner-a"
PARTNER_B = "demo-partner-b"

WISHES_A = [
    ("Call me during lunch breaks", "communication", True),
    ("Share your daily highs and lows", "communication", False),
    ("Give me a morning hug", "affection", False),
    ("Leave sweet notes in unexpected places", "affection", False),
    ("Cook dinner twice a week", "household", False),
    ("Take out the trash without being asked", "household", False),
    ("Plan a surprise date night monthly", "time", False),
    ("Watch my favorite show with me", "time", False),
    ("Exercise together on weekends", "personal", False),
    ("Support my hobby projects", "personal", False),
    ("Text me good morning daily", "communication", False),
    ("Help with weekly meal prep", "household", False),
]

WISHES_B = [
    ("Listen without interrupting", "communication", False),
    ("Ask about my work projects", "communication", False),
    ("Hold hands while watching TV", "affection", True),
    ("Compliment me more often", "affection", False),
    ("Keep the bedroom tidy", "household", False),
    ("Share household budgeting tasks", "household", False),
    ("Join me for morning coffee", "time", False),
    ("Have tech-free evenings together", "time", False),
    ("Try my favorite hobby with me", "personal", False),
    ("Give me alone time when needed", "personal", False),
    ("Celebrate small victories together", "affection", False),
    ("Plan weekend adventures", "time", False),
]


def _legacy_wishes(week: int, prefix: str, author: str, rows) -> list:
    return [
        {
            "id": f"w{week}-{prefix}{i}",
            "text": text,
            "category": category,
            "isMostWanted": most_wanted,
            "order": i,
            "createdBy": author,
        }
        for i, (text, category, most_wanted) in enumerate(rows, start=1)
    ]


def _legacy_box(week: int, created_at: datetime, locked_at: datetime, revealed_at=None) -> dict:
    return {
        "id": f"{DEMO_PAIRING_ID}-box-{week}",
        "innermostId": DEMO_PAIRING_ID,
        "partnerA": PARTNER_A,
        "partnerB": PARTNER_B,
        "weekNumber": week,
        "status": "guessing",  # ignored: phase is re-derived
        "partnerAWishlist": _legacy_wishes(week, "a", PARTNER_A, WISHES_A),
        "partnerBWishList": _legacy_wishes(week, "b", PARTNER_B, WISHES_B),
        # A commits to B's wishes, B commits to A's wishes
        "partnerAWilling": [
            {"wishId": f"w{week}-b3", "priority": 1, "effortLevel": "easy"},
            {"wishId": f"w{week}-b7", "priority": 2, "effortLevel": "moderate"},
            {"wishId": f"w{week}-b10", "priority": 3, "effortLevel": "easy"},
        ],
        "partnerBWillingList": [
            {"wantId": f"w{week}-a1", "priority": 1, "effort": "moderate"},
            {"wantId": f"w{week}-a3", "priority": 2, "effort": "easy"},
            {"wantId": f"w{week}-a7", "priority": 3, "effort": "challenging"},
        ],
        "isLocked": True,
        "lockedAt": locked_at,
        "revealedAt": revealed_at,
        "createdAt": created_at,
    }


def build_demo_documents(now: datetime):
    """Return (boxes, scores) for the demo pairing, in canonical form."""
    revealed_lock = now - timedelta(days=14)
    current_lock = now - timedelta(days=2)

    past_doc = _legacy_box(1, revealed_lock - timedelta(days=3), revealed_lock, revealed_lock + timedelta(days=7))
    past = settle(WillingBox(**willing_box_fields(past_doc)), now)
    current_doc = _legacy_box(2, current_lock - timedelta(days=3), current_lock)
    current = settle(WillingBox(**willing_box_fields(current_doc)), now)

    past_guesses = WeeklyScore(
        **weekly_score_fields(
            {
                "id": WeeklyScore.make_id(DEMO_PAIRING_ID, 1),
                "innermostId": DEMO_PAIRING_ID,
                "weekNumber": 1,
                "partnerA": PARTNER_A,
                "partnerB": PARTNER_B,
                # A guesses what B committed to (A's own wishes)
                "partnerAGuesses": [
                    {"wantId": "w1-a1", "effort": "moderate"},
                    {"wantId": "w1-a3", "effort": "moderate"},
                    {"wantId": "w1-a7", "effort": "challenging"},
                ],
                "partnerBGuesses": [
                    {"wishId": "w1-b3", "effort": "easy"},
                    {"wishId": "w1-b7", "effort": "easy"},
                ],
                "createdAt": revealed_lock + timedelta(days=1),
            }
        )
    )
    past_score = finalize_score(past_guesses, past, past.revealed_at, settings.cycle_rules)
    return [past, current], [past_score]


async def run_seed(session: AsyncSession, now: Optional[datetime] = None) -> Optional[dict]:
    """Seed the demo pairing into the given session. Returns None if it already exists."""
    existing = await session.execute(
        select(WillingBoxModel).where(WillingBoxModel.pairing_id == DEMO_PAIRING_ID)
    )
    if existing.scalars().first() is not None:
        return None

    boxes, scores = build_demo_documents(now or utcnow())
    box_repo = WillingBoxRepositoryImpl(session)
    score_repo = WeeklyScoreRepositoryImpl(session)
    for box in boxes:
        await box_repo.create(box)
    for score in scores:
        await score_repo.create(score)
    logger.info("Seeded demo pairing %s with %d weeks", DEMO_PAIRING_ID, len(boxes))
    return {
        "pairing_id": DEMO_PAIRING_ID,
        "box_ids": [b.id for b in boxes],
        "scores": {s.week_number: (s.partner_a_score, s.partner_b_score) for s in scores},
    }


async def seed_demo_pairing():
    """CLI entrypoint: create tables if needed, run_seed, print."""
    configure_logging()
    engine = create_engine(settings.database_url, settings.database_echo)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with create_session_factory(engine)() as session:
        result = await run_seed(session)
    await engine.dispose()
    if result is None:
        print("❌ Demo pairing already exists.")
        return
    print("\n✅ Demo pairing seeded successfully.")
    print(f"   Pairing: {result['pairing_id']}")
    print(f"   Willing boxes: {result['box_ids']}")
    print(f"   Scores by week: {result['scores']}")


if __name__ == "__main__":
    asyncio.run(seed_demo_pairing())
