"""Structural checks applied at submission time."""
from collections import Counter
from typing import Iterable, List

from innermost.domain.common.errors import ValidationError
from innermost.domain.willing_box.models import (
    CycleRules,
    Guess,
    PartnerSlot,
    WillingBox,
    WillingEntry,
    Wish,
)


def _duplicates(values: Iterable) -> List:
    return sorted(value for value, count in Counter(values).items() if count > 1)


def validate_wish_list(
    box: WillingBox, slot: PartnerSlot, wishes: List[Wish], rules: CycleRules
) -> None:
    """Validate a partner's full wish list for the week."""
    size = rules.wish_list_size
    if len(wishes) != size:
        raise ValidationError(f"Wish list must contain exactly {size} wishes, got {len(wishes)}")

    most_wanted = [w.id for w in wishes if w.is_most_wanted]
    if len(most_wanted) > 1:
        raise ValidationError(
            f"At most one wish may be flagged most-wanted, got {len(most_wanted)}: {most_wanted}"
        )

    positions = sorted(w.position for w in wishes)
    if positions != list(range(1, size + 1)):
        raise ValidationError(f"Wish positions must be a permutation of 1..{size}, got {positions}")

    duplicate_ids = _duplicates(w.id for w in wishes)
    if duplicate_ids:
        raise ValidationError(f"Duplicate wish ids: {duplicate_ids}")

    counterpart_ids = {w.id for w in box.wishes_for(slot.counterpart)}
    clashing = sorted(w.id for w in wishes if w.id in counterpart_ids)
    if clashing:
        raise ValidationError(f"Wish ids already used by the other partner: {clashing}")

    author_id = box.partner_id(slot)
    foreign = sorted(w.id for w in wishes if w.author_id != author_id)
    if foreign:
        raise ValidationError(f"Wishes {foreign} were not authored by partner {author_id}")


def validate_willing_selection(
    box: WillingBox, slot: PartnerSlot, entries: List[WillingEntry], rules: CycleRules
) -> None:
    """Validate a partner's willing selection against the counterpart's wish list."""
    size = rules.willing_selection_size
    if len(entries) != size:
        raise ValidationError(f"Willing selection must contain exactly {size} entries, got {len(entries)}")

    counterpart_ids = {w.id for w in box.wishes_for(slot.counterpart)}
    unknown = sorted(e.wish_id for e in entries if e.wish_id not in counterpart_ids)
    if unknown:
        raise ValidationError(f"Willing entries reference wishes outside the partner's list: {unknown}")

    duplicate_ids = _duplicates(e.wish_id for e in entries)
    if duplicate_ids:
        raise ValidationError(f"The same wish cannot be selected twice: {duplicate_ids}")

    priorities = sorted(e.priority for e in entries)
    if priorities != list(range(1, size + 1)):
        raise ValidationError(f"Priorities must be a permutation of 1..{size}, got {priorities}")


def validate_guesses(guesses: List[Guess], rules: CycleRules) -> None:
    """Validate a guess set.

    Unknown wish ids are allowed here; they simply score nothing.
    """
    limit = rules.willing_selection_size
    if len(guesses) > limit:
        raise ValidationError(f"At most {limit} guesses may be submitted, got {len(guesses)}")

    duplicate_ids = _duplicates(g.wish_id for g in guesses)
    if duplicate_ids:
        raise ValidationError(f"Only one guess per wish is allowed: {duplicate_ids}")
