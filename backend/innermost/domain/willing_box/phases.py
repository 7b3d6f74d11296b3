"""Phase state machine for a weekly willing box.

The phase is never stored as an independent source of truth: it is derived from
the wish lists, the willing selections and the reveal timestamp. ``settle``
refreshes the cached ``phase``/``is_locked``/``locked_at`` fields on a box after
every mutation.

The only time-dependent rule is ``guessing -> revealed``, which fires once
``reveal_after_days`` have elapsed since the lock. Callers evaluate it on read
via ``is_reveal_eligible``; nothing here schedules anything.
"""
from datetime import datetime, timedelta
from typing import Optional

from innermost.domain.common.errors import InvalidPhaseError
from innermost.domain.common.types import as_utc
from innermost.domain.willing_box.models import CycleRules, Phase, PartnerSlot, WillingBox

DEFAULT_RULES = CycleRules()

LOCKED_PHASES = (Phase.GUESSING, Phase.REVEALED)


def _wish_lists_complete(box: WillingBox, rules: CycleRules) -> bool:
    return all(len(box.wishes_for(slot)) == rules.wish_list_size for slot in PartnerSlot)


def _selections_complete(box: WillingBox, rules: CycleRules) -> bool:
    for slot in PartnerSlot:
        selection = box.selection_for(slot)
        if selection is None or len(selection.entries) != rules.willing_selection_size:
            return False
    return True


def derive_phase(box: WillingBox, rules: CycleRules = DEFAULT_RULES) -> Phase:
    """Compute the phase justified by the box's data. Pure and idempotent."""
    if _selections_complete(box, rules):
        if box.revealed_at is not None:
            return Phase.REVEALED
        return Phase.GUESSING
    if _wish_lists_complete(box, rules):
        return Phase.SELECTING_WILLING
    return Phase.PLANTING_TREES


def is_reveal_eligible(
    now: datetime,
    locked_at: Optional[datetime],
    reveal_after: timedelta = timedelta(days=DEFAULT_RULES.reveal_after_days),
) -> bool:
    """True once ``reveal_after`` has fully elapsed since the lock.

    A box that never locked can never be revealed.
    """
    if locked_at is None:
        return False
    return as_utc(now) - as_utc(locked_at) >= reveal_after


def reveal_window(rules: CycleRules = DEFAULT_RULES) -> timedelta:
    return timedelta(days=rules.reveal_after_days)


def settle(box: WillingBox, now: datetime, rules: CycleRules = DEFAULT_RULES) -> WillingBox:
    """Refresh the cached phase fields from the box's data.

    ``locked_at`` is stamped the first time the box reaches a locked phase and
    kept afterwards.
    """
    phase = derive_phase(box, rules)
    is_locked = phase in LOCKED_PHASES
    locked_at = box.locked_at
    if is_locked and locked_at is None:
        locked_at = now
    if not is_locked:
        locked_at = None
    return box.model_copy(update={"phase": phase, "is_locked": is_locked, "locked_at": locked_at})


def with_derived_phase(box: WillingBox, rules: CycleRules = DEFAULT_RULES) -> WillingBox:
    """Replace a loaded box's cached ``phase``/``is_locked`` with what its data justifies.

    Used on read, so ``locked_at`` is kept as stored and nothing is stamped.
    """
    phase = derive_phase(box, rules)
    is_locked = phase in LOCKED_PHASES
    if box.phase is phase and box.is_locked is is_locked:
        return box
    return box.model_copy(update={"phase": phase, "is_locked": is_locked})


def assert_forward(previous: Phase, current: Phase) -> None:
    """Reject any transition that would move the phase backwards or skip a state."""
    if current.rank < previous.rank or current.rank - previous.rank > 1:
        raise InvalidPhaseError(
            f"Illegal phase transition {previous.value} -> {current.value}",
            expected=previous.value,
            actual=current.value,
        )


def require_phase(box: WillingBox, expected: Phase, action: str, rules: CycleRules = DEFAULT_RULES) -> Phase:
    """Raise InvalidPhaseError unless the box's derived phase is ``expected``."""
    actual = derive_phase(box, rules)
    if actual is not expected:
        raise InvalidPhaseError(
            f"Cannot {action} while willing box {box.id} is in phase {actual.value}",
            expected=expected.value,
            actual=actual.value,
        )
    return actual
