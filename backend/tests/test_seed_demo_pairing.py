"""Tests for the demo pairing seed script."""
import importlib.util
from datetime import datetime, timedelta, timezone
from pathlib import Path

from innermost.domain.willing_box.models import Phase
from innermost.domain.willing_box.services import WillingBoxService
from innermost.infra.db.repositories.willing_box_repo import (
    WeeklyScoreRepositoryImpl,
    WillingBoxRepositoryImpl,
)

from tests.factories import FakeClock

backend_dir = Path(__file__).parent.parent
NOW = datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc)


def _load_script_module(name: str):
    spec = importlib.util.spec_from_file_location(
        name,
        backend_dir / "scripts" / f"{name}.py",
    )
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


seed_module = _load_script_module("seed_demo_pairing")


def test_demo_documents_derive_phases():
    boxes, scores = seed_module.build_demo_documents(NOW)
    past, current = boxes
    assert past.phase is Phase.REVEALED
    assert current.phase is Phase.GUESSING
    assert current.locked_at == NOW - timedelta(days=2)
    assert scores[0].is_complete is True
    assert (scores[0].partner_a_score, scores[0].partner_b_score) == (3, 2)


async def test_run_seed_is_idempotent(db_session):
    result = await seed_module.run_seed(db_session, now=NOW)
    assert result["pairing_id"] == seed_module.DEMO_PAIRING_ID
    assert result["box_ids"] == ["demo-pairing-box-1", "demo-pairing-box-2"]
    assert result["scores"] == {1: (3, 2)}

    assert await seed_module.run_seed(db_session, now=NOW) is None


async def test_seeded_week_reveals_after_window(db_session):
    await seed_module.run_seed(db_session, now=NOW)
    clock = FakeClock(NOW)
    service = WillingBoxService(
        WillingBoxRepositoryImpl(db_session),
        WeeklyScoreRepositoryImpl(db_session),
        clock,
    )

    active = await service.get_active_willing_box(seed_module.DEMO_PAIRING_ID)
    assert active.week_number == 2
    assert active.phase is Phase.GUESSING

    clock.advance(days=5)
    assert await service.get_active_willing_box(seed_module.DEMO_PAIRING_ID) is None
    week_two = await service.get_weekly_score(seed_module.DEMO_PAIRING_ID, 2)
    assert week_two.is_complete is True
    assert (week_two.partner_a_score, week_two.partner_b_score) == (0, 0)
