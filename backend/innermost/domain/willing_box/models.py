"""Willing Box domain models."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from innermost.domain.common.errors import AuthorizationError


class WishCategory(str, Enum):
    """Wish category enum."""
    COMMUNICATION = "communication"
    AFFECTION = "affection"
    HOUSEHOLD = "household"
    TIME_TOGETHER = "time-together"
    PERSONAL = "personal"


class EffortLevel(str, Enum):
    """Self-declared effort for a willing entry (and for a guess about one)."""
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"


class PartnerSlot(str, Enum):
    """Which side of the pairing an actor is on."""
    A = "A"
    B = "B"

    @property
    def counterpart(self) -> "PartnerSlot":
        return PartnerSlot.B if self is PartnerSlot.A else PartnerSlot.A


class Phase(str, Enum):
    """Weekly cycle phase, in strict forward order."""
    PLANTING_TREES = "planting_trees"
    SELECTING_WILLING = "selecting_willing"
    GUESSING = "guessing"
    REVEALED = "revealed"

    @property
    def rank(self) -> int:
        return _PHASE_ORDER.index(self)


_PHASE_ORDER = [
    Phase.PLANTING_TREES,
    Phase.SELECTING_WILLING,
    Phase.GUESSING,
    Phase.REVEALED,
]


class Wish(BaseModel):
    """A candidate action one partner wants the other to perform."""
    id: str
    description: str
    category: WishCategory
    is_most_wanted: bool = False
    position: int  # 1..12 within the author's list
    author_id: str


class WillingEntry(BaseModel):
    """One committed wish inside a willing selection."""
    wish_id: str
    priority: int  # 1..3, unique within the selection
    effort_level: EffortLevel


class WillingSelection(BaseModel):
    """A partner's committed subset of the counterpart's wishes."""
    entries: List[WillingEntry]
    submitted_at: datetime

    def entry_for(self, wish_id: str) -> Optional[WillingEntry]:
        for entry in self.entries:
            if entry.wish_id == wish_id:
                return entry
        return None


class WillingBox(BaseModel):
    """Per-week aggregate holding both partners' submissions for one cycle.

    ``phase`` and ``is_locked`` are caches of ``phases.derive_phase``; they are
    refreshed by ``phases.settle`` after every mutation and never set directly.
    """
    id: str
    pairing_id: str
    partner_a_id: str
    partner_b_id: str
    week_number: int = Field(ge=1)
    phase: Phase = Phase.PLANTING_TREES
    partner_a_wishes: List[Wish] = Field(default_factory=list)
    partner_b_wishes: List[Wish] = Field(default_factory=list)
    partner_a_selection: Optional[WillingSelection] = None
    partner_b_selection: Optional[WillingSelection] = None
    is_locked: bool = False
    locked_at: Optional[datetime] = None
    revealed_at: Optional[datetime] = None
    revision: int = 0
    created_at: datetime
    updated_at: datetime

    def partner_id(self, slot: PartnerSlot) -> str:
        return self.partner_a_id if slot is PartnerSlot.A else self.partner_b_id

    def slot_for(self, user_id: str) -> PartnerSlot:
        """Resolve a user id to its slot in this box."""
        if user_id == self.partner_a_id:
            return PartnerSlot.A
        if user_id == self.partner_b_id:
            return PartnerSlot.B
        raise AuthorizationError(f"User {user_id} is not a partner in willing box {self.id}")

    def wishes_for(self, slot: PartnerSlot) -> List[Wish]:
        return self.partner_a_wishes if slot is PartnerSlot.A else self.partner_b_wishes

    def selection_for(self, slot: PartnerSlot) -> Optional[WillingSelection]:
        return self.partner_a_selection if slot is PartnerSlot.A else self.partner_b_selection

    def with_wishes(self, slot: PartnerSlot, wishes: List[Wish]) -> "WillingBox":
        field = "partner_a_wishes" if slot is PartnerSlot.A else "partner_b_wishes"
        return self.model_copy(update={field: list(wishes)})

    def with_selection(self, slot: PartnerSlot, selection: WillingSelection) -> "WillingBox":
        field = "partner_a_selection" if slot is PartnerSlot.A else "partner_b_selection"
        return self.model_copy(update={field: selection})


class Guess(BaseModel):
    """One partner's recollection of an effort the other committed to."""
    wish_id: str
    declared_effort: EffortLevel


class WeeklyScore(BaseModel):
    """Guesses and scores for one pairing-week."""
    id: str
    pairing_id: str
    week_number: int = Field(ge=1)
    partner_a_id: str
    partner_b_id: str
    partner_a_guesses: List[Guess] = Field(default_factory=list)
    partner_b_guesses: List[Guess] = Field(default_factory=list)
    partner_a_score: int = Field(default=0, ge=0)
    partner_b_score: int = Field(default=0, ge=0)
    is_complete: bool = False
    completed_at: Optional[datetime] = None
    revision: int = 0
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def make_id(pairing_id: str, week_number: int) -> str:
        return f"{pairing_id}_week_{week_number}"

    def guesses_for(self, slot: PartnerSlot) -> List[Guess]:
        return self.partner_a_guesses if slot is PartnerSlot.A else self.partner_b_guesses

    def score_for(self, slot: PartnerSlot) -> int:
        return self.partner_a_score if slot is PartnerSlot.A else self.partner_b_score

    def with_guesses(self, slot: PartnerSlot, guesses: List[Guess]) -> "WeeklyScore":
        field = "partner_a_guesses" if slot is PartnerSlot.A else "partner_b_guesses"
        return self.model_copy(update={field: list(guesses)})


class GuessOutcome(BaseModel):
    """How a single guess scored."""
    wish_id: str
    declared_effort: EffortLevel
    actual_effort: Optional[EffortLevel] = None  # None when the wish was not selected
    is_most_wanted: bool = False
    points: int = 0


class ScoreResult(BaseModel):
    """Output of the scoring engine."""
    score_a: int
    score_b: int
    outcomes_a: List[GuessOutcome] = Field(default_factory=list)
    outcomes_b: List[GuessOutcome] = Field(default_factory=list)

    def score_for(self, slot: PartnerSlot) -> int:
        return self.score_a if slot is PartnerSlot.A else self.score_b


class CycleRules(BaseModel):
    """Game constants, passed in so the pure functions never read global settings."""
    wish_list_size: int = 12
    willing_selection_size: int = 3
    reveal_after_days: int = 7
    weeks_per_tree: int = 12
