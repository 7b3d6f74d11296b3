"""Pure transitions applied to a willing box or weekly score.

Every function takes the current document and returns the next one without
touching storage, so the service can re-run it on fresh data after a lost
compare-and-set.
"""
from datetime import datetime
from typing import List, Optional

from innermost.domain.common.errors import InvalidPhaseError, LockedError
from innermost.domain.common.types import generate_id
from innermost.domain.willing_box.models import (
    CycleRules,
    Guess,
    PartnerSlot,
    Phase,
    WeeklyScore,
    WillingBox,
    WillingEntry,
    WillingSelection,
    Wish,
)
from innermost.domain.willing_box.phases import (
    LOCKED_PHASES,
    assert_forward,
    derive_phase,
    is_reveal_eligible,
    require_phase,
    reveal_window,
    settle,
)
from innermost.domain.willing_box.scoring import compute_weekly_score
from innermost.domain.willing_box.validation import (
    validate_guesses,
    validate_willing_selection,
    validate_wish_list,
)


def new_willing_box(
    pairing_id: str,
    partner_a_id: str,
    partner_b_id: str,
    week_number: int,
    now: datetime,
) -> WillingBox:
    """Fresh box in ``planting_trees`` with empty lists."""
    return WillingBox(
        id=generate_id(),
        pairing_id=pairing_id,
        partner_a_id=partner_a_id,
        partner_b_id=partner_b_id,
        week_number=week_number,
        phase=Phase.PLANTING_TREES,
        created_at=now,
        updated_at=now,
    )


def _blank_score(box: WillingBox, now: datetime) -> WeeklyScore:
    return WeeklyScore(
        id=WeeklyScore.make_id(box.pairing_id, box.week_number),
        pairing_id=box.pairing_id,
        week_number=box.week_number,
        partner_a_id=box.partner_a_id,
        partner_b_id=box.partner_b_id,
        created_at=now,
        updated_at=now,
    )


def _finish(previous: WillingBox, updated: WillingBox, now: datetime, rules: CycleRules) -> WillingBox:
    settled = settle(updated, now, rules)
    assert_forward(derive_phase(previous, rules), settled.phase)
    return settled.model_copy(update={"updated_at": now})


def apply_wish_list(
    box: WillingBox, slot: PartnerSlot, wishes: List[Wish], now: datetime, rules: CycleRules
) -> WillingBox:
    require_phase(box, Phase.PLANTING_TREES, "submit a wish list", rules)
    validate_wish_list(box, slot, wishes, rules)
    ordered = sorted(wishes, key=lambda w: w.position)
    return _finish(box, box.with_wishes(slot, ordered), now, rules)


def apply_willing_selection(
    box: WillingBox,
    slot: PartnerSlot,
    entries: List[WillingEntry],
    now: datetime,
    rules: CycleRules,
) -> WillingBox:
    if box.is_locked or derive_phase(box, rules) in LOCKED_PHASES:
        raise LockedError(f"Willing box {box.id} is locked; selections can no longer change")
    require_phase(box, Phase.SELECTING_WILLING, "submit a willing selection", rules)
    validate_willing_selection(box, slot, entries, rules)
    selection = WillingSelection(
        entries=sorted(entries, key=lambda e: e.priority),
        submitted_at=now,
    )
    return _finish(box, box.with_selection(slot, selection), now, rules)


def apply_reveal(box: WillingBox, now: datetime, rules: CycleRules) -> WillingBox:
    """Move a guessing box to ``revealed`` once the reveal window has elapsed.

    Returns the box unchanged when it is not eligible.
    """
    if derive_phase(box, rules) is not Phase.GUESSING:
        return box
    if not is_reveal_eligible(now, box.locked_at, reveal_window(rules)):
        return box
    return _finish(box, box.model_copy(update={"revealed_at": now}), now, rules)


def apply_guesses(
    score: Optional[WeeklyScore],
    box: WillingBox,
    slot: PartnerSlot,
    guesses: List[Guess],
    now: datetime,
    rules: CycleRules,
) -> WeeklyScore:
    """Record a partner's guesses, creating the week's score document if needed."""
    require_phase(box, Phase.GUESSING, "submit guesses", rules)
    validate_guesses(guesses, rules)
    if score is None:
        score = _blank_score(box, now)
    elif score.is_complete:
        raise InvalidPhaseError(
            f"Weekly score {score.id} is already final",
            expected=Phase.GUESSING.value,
            actual=Phase.REVEALED.value,
        )
    return score.with_guesses(slot, guesses).model_copy(update={"updated_at": now})


def finalize_score(
    score: Optional[WeeklyScore], box: WillingBox, now: datetime, rules: CycleRules
) -> WeeklyScore:
    """Compute final scores for a revealed box.

    A week nobody guessed in still gets a completed score of 0-0.
    """
    require_phase(box, Phase.REVEALED, "finalize the weekly score", rules)
    if score is None:
        score = _blank_score(box, now)
    elif score.is_complete:
        return score

    result = compute_weekly_score(
        box.partner_a_wishes,
        box.partner_b_wishes,
        box.partner_a_selection,
        box.partner_b_selection,
        score.partner_a_guesses,
        score.partner_b_guesses,
    )
    return score.model_copy(
        update={
            "partner_a_score": result.score_a,
            "partner_b_score": result.score_b,
            "is_complete": True,
            "completed_at": now,
            "updated_at": now,
        }
    )
