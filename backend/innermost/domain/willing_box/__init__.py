"""Weekly willing-box cycle: wishes, willing selections, guesses and scoring."""
from innermost.domain.willing_box.models import (
    CycleRules,
    EffortLevel,
    Guess,
    GuessOutcome,
    PartnerSlot,
    Phase,
    ScoreResult,
    WeeklyScore,
    WillingBox,
    WillingEntry,
    WillingSelection,
    Wish,
    WishCategory,
)
from innermost.domain.willing_box.phases import derive_phase, is_reveal_eligible
from innermost.domain.willing_box.scoring import compute_weekly_score
from innermost.domain.willing_box.services import WillingBoxService

__all__ = [
    "CycleRules",
    "EffortLevel",
    "Guess",
    "GuessOutcome",
    "PartnerSlot",
    "Phase",
    "ScoreResult",
    "WeeklyScore",
    "WillingBox",
    "WillingEntry",
    "WillingSelection",
    "Wish",
    "WishCategory",
    "derive_phase",
    "is_reveal_eligible",
    "compute_weekly_score",
    "WillingBoxService",
]
