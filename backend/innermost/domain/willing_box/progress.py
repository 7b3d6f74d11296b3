"""Dashboard-style views over a pairing's weekly cycles."""
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from innermost.domain.common.types import as_utc
from innermost.domain.willing_box.models import (
    PartnerSlot,
    Phase,
    WeeklyScore,
    WillingBox,
)


class NextAction(str, Enum):
    """What a partner should do next this week."""
    PLANT_TREES = "plant_trees"
    SELECT_WILLING = "select_willing"
    MAKE_GUESSES = "make_guesses"
    AWAIT_REVEAL = "await_reveal"
    WAIT_FOR_PARTNER = "wait_for_partner"
    VIEW_RESULTS = "view_results"


class TreeStage(str, Enum):
    """Growth stage of a pairing's tree."""
    SEED = "seed"
    SPROUT = "sprout"
    YOUNG = "young"
    MATURE = "mature"
    FLOURISHING = "flourishing"


class PartnerStatus(BaseModel):
    """Next step for one partner in the current week."""
    week_number: int
    phase: Phase
    action: NextAction
    needs_action: bool
    waiting_on_partner: bool = False


class PairingStats(BaseModel):
    """Aggregate results across a pairing's completed weeks."""
    leaves_grown: int  # completed weeks
    total_score: int
    growth_percent: int
    tree_stage: TreeStage
    games_played: int
    average_score: float
    win_rate: float


def current_calendar_week(now: datetime) -> int:
    """Week-of-year counted in whole 7-day blocks from January 1st."""
    now = as_utc(now)
    start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return (now - start) // timedelta(weeks=1) + 1


def next_action(
    box: Optional[WillingBox], slot: PartnerSlot, score: Optional[WeeklyScore] = None
) -> PartnerStatus:
    """Work out what ``slot`` should do next given the box's cached phase."""
    if box is None:
        return PartnerStatus(
            week_number=1,
            phase=Phase.PLANTING_TREES,
            action=NextAction.PLANT_TREES,
            needs_action=True,
        )

    def status(action: NextAction, needs_action: bool, waiting: bool = False) -> PartnerStatus:
        return PartnerStatus(
            week_number=box.week_number,
            phase=box.phase,
            action=action,
            needs_action=needs_action,
            waiting_on_partner=waiting,
        )

    if box.phase is Phase.PLANTING_TREES:
        if not box.wishes_for(slot):
            return status(NextAction.PLANT_TREES, True)
        return status(NextAction.WAIT_FOR_PARTNER, False, waiting=True)

    if box.phase is Phase.SELECTING_WILLING:
        if box.selection_for(slot) is None:
            return status(NextAction.SELECT_WILLING, True)
        return status(NextAction.WAIT_FOR_PARTNER, False, waiting=True)

    if box.phase is Phase.GUESSING:
        if score is None or not score.guesses_for(slot):
            return status(NextAction.MAKE_GUESSES, True)
        return status(NextAction.AWAIT_REVEAL, False)

    return status(NextAction.VIEW_RESULTS, False)


def tree_stage(growth_percent: int) -> TreeStage:
    if growth_percent < 20:
        return TreeStage.SEED
    if growth_percent < 40:
        return TreeStage.SPROUT
    if growth_percent < 60:
        return TreeStage.YOUNG
    if growth_percent < 80:
        return TreeStage.MATURE
    return TreeStage.FLOURISHING


def pairing_stats(
    scores: List[WeeklyScore], viewer: PartnerSlot, weeks_per_tree: int = 12
) -> PairingStats:
    """Summarise completed weeks from ``viewer``'s point of view."""
    completed = [s for s in scores if s.is_complete]
    games = len(completed)
    total = sum(s.partner_a_score + s.partner_b_score for s in completed)
    growth = min(100, round(games * 100 / weeks_per_tree)) if weeks_per_tree > 0 else 0

    own = [s.score_for(viewer) for s in completed]
    wins = sum(1 for s in completed if s.score_for(viewer) > s.score_for(viewer.counterpart))

    return PairingStats(
        leaves_grown=games,
        total_score=total,
        growth_percent=growth,
        tree_stage=tree_stage(growth),
        games_played=games,
        average_score=(sum(own) / games) if games else 0.0,
        win_rate=(wins / games) if games else 0.0,
    )
