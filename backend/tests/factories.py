"""Builders and in-memory collaborators shared by the willing box tests."""
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from innermost.domain.common.errors import ConflictError
from innermost.domain.willing_box.cycle import new_willing_box
from innermost.domain.willing_box.models import (
    EffortLevel,
    Guess,
    PartnerSlot,
    WeeklyScore,
    WillingBox,
    WillingEntry,
    Wish,
    WishCategory,
)

PAIRING_ID = "pairing-1"
PARTNER_A = "user-a"
PARTNER_B = "user-b"
T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

_CATEGORIES = list(WishCategory)


def make_wishes(
    author_id: str,
    prefix: str,
    most_wanted: Optional[int] = 1,
    count: int = 12,
) -> List[Wish]:
    """``count`` wishes with ids ``{prefix}1..{prefix}{count}``; ``most_wanted`` is a 1-based position or None."""
    return [
        Wish(
            id=f"{prefix}{i}",
            description=f"Wish {prefix}{i}",
            category=_CATEGORIES[(i - 1) % len(_CATEGORIES)],
            is_most_wanted=(i == most_wanted),
            position=i,
            author_id=author_id,
        )
        for i in range(1, count + 1)
    ]


def make_entries(*picks: Tuple[str, str]) -> List[WillingEntry]:
    """Entries from ``(wish_id, effort)`` pairs, priority in the given order."""
    return [
        WillingEntry(wish_id=wish_id, priority=i, effort_level=EffortLevel(effort))
        for i, (wish_id, effort) in enumerate(picks, start=1)
    ]


def make_guesses(*picks: Tuple[str, str]) -> List[Guess]:
    return [Guess(wish_id=wish_id, declared_effort=EffortLevel(effort)) for wish_id, effort in picks]


def empty_box(week_number: int = 1, now: datetime = T0) -> WillingBox:
    return new_willing_box(PAIRING_ID, PARTNER_A, PARTNER_B, week_number, now)


# A's wishes are a1..a12 (a7 most-wanted), B's are b1..b12 (b3 most-wanted).
WISHES_A = make_wishes(PARTNER_A, "a", most_wanted=7)
WISHES_B = make_wishes(PARTNER_B, "b", most_wanted=3)
# A commits to B's wishes; B commits to A's wishes.
SELECTION_A = make_entries(("b3", "easy"), ("b5", "moderate"), ("b9", "challenging"))
SELECTION_B = make_entries(("a7", "easy"), ("a2", "moderate"), ("a11", "challenging"))


class FakeClock:
    """Settable clock."""

    def __init__(self, now: datetime = T0):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now


class InMemoryWillingBoxRepository:
    """Dict-backed store honouring the compare-and-set contract.

    ``before_update`` runs just before a compare-and-set is evaluated, so a test
    can slip in a write from "the other session". Boxes come back exactly as
    stored, cached phase included, so the service has to re-derive it.
    """

    def __init__(self):
        self.boxes: Dict[str, WillingBox] = {}
        self.before_update: Optional[Callable[[WillingBox], None]] = None
        self.update_calls = 0

    def put(self, box: WillingBox) -> None:
        self.boxes[box.id] = box.model_copy(deep=True)

    async def get_by_id(self, box_id: str) -> Optional[WillingBox]:
        box = self.boxes.get(box_id)
        return box.model_copy(deep=True) if box else None

    async def get_active(self, pairing_id: str) -> Optional[WillingBox]:
        active = [b for b in self.boxes.values() if b.pairing_id == pairing_id and b.revealed_at is None]
        if not active:
            return None
        return max(active, key=lambda b: b.week_number).model_copy(deep=True)

    async def get_latest(self, pairing_id: str) -> Optional[WillingBox]:
        boxes = [b for b in self.boxes.values() if b.pairing_id == pairing_id]
        if not boxes:
            return None
        return max(boxes, key=lambda b: b.week_number).model_copy(deep=True)

    async def create(self, box: WillingBox) -> WillingBox:
        for existing in self.boxes.values():
            if existing.pairing_id == box.pairing_id and existing.week_number == box.week_number:
                raise ConflictError(f"duplicate week {box.week_number}")
        self.put(box)
        return box

    async def update(self, box: WillingBox, expected_revision: int) -> bool:
        self.update_calls += 1
        if self.before_update is not None:
            hook, self.before_update = self.before_update, None
            hook(box)
        stored = self.boxes.get(box.id)
        if stored is None or stored.revision != expected_revision:
            return False
        self.put(box.model_copy(update={"revision": expected_revision + 1}))
        return True


class InMemoryWeeklyScoreRepository:
    """Dict-backed weekly score store."""

    def __init__(self):
        self.scores: Dict[Tuple[str, int], WeeklyScore] = {}

    async def get(self, pairing_id: str, week_number: int) -> Optional[WeeklyScore]:
        score = self.scores.get((pairing_id, week_number))
        return score.model_copy(deep=True) if score else None

    async def list_for_pairing(self, pairing_id: str) -> List[WeeklyScore]:
        return [
            s.model_copy(deep=True)
            for (p, _), s in sorted(self.scores.items(), key=lambda kv: kv[0][1])
            if p == pairing_id
        ]

    async def create(self, score: WeeklyScore) -> WeeklyScore:
        key = (score.pairing_id, score.week_number)
        if key in self.scores:
            raise ConflictError(f"duplicate score {score.id}")
        self.scores[key] = score.model_copy(deep=True)
        return score

    async def update(self, score: WeeklyScore, expected_revision: int) -> bool:
        key = (score.pairing_id, score.week_number)
        stored = self.scores.get(key)
        if stored is None or stored.revision != expected_revision:
            return False
        self.scores[key] = score.model_copy(update={"revision": expected_revision + 1}, deep=True)
        return True


def slot_wishes(slot: PartnerSlot) -> List[Wish]:
    return WISHES_A if slot is PartnerSlot.A else WISHES_B
