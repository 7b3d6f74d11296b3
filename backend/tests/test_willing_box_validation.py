"""Unit tests for innermost.domain.willing_box.validation."""
import pytest

from innermost.domain.common.errors import ValidationError
from innermost.domain.willing_box.models import CycleRules, PartnerSlot
from innermost.domain.willing_box.validation import (
    validate_guesses,
    validate_willing_selection,
    validate_wish_list,
)

from tests.factories import (
    PARTNER_A,
    PARTNER_B,
    SELECTION_A,
    WISHES_A,
    WISHES_B,
    empty_box,
    make_entries,
    make_guesses,
    make_wishes,
)

RULES = CycleRules()


def _box_with_lists():
    return empty_box().with_wishes(PartnerSlot.A, WISHES_A).with_wishes(PartnerSlot.B, WISHES_B)


def test_valid_wish_list_passes():
    validate_wish_list(empty_box(), PartnerSlot.A, WISHES_A, RULES)


def test_wish_list_without_most_wanted_is_allowed():
    validate_wish_list(empty_box(), PartnerSlot.A, make_wishes(PARTNER_A, "a", most_wanted=None), RULES)


@pytest.mark.parametrize("count", [0, 11, 13])
def test_wish_list_wrong_size(count):
    with pytest.raises(ValidationError, match="exactly 12"):
        validate_wish_list(empty_box(), PartnerSlot.A, make_wishes(PARTNER_A, "a", count=count), RULES)


def test_wish_list_two_most_wanted():
    wishes = make_wishes(PARTNER_A, "a", most_wanted=1)
    wishes[5] = wishes[5].model_copy(update={"is_most_wanted": True})
    with pytest.raises(ValidationError, match="most-wanted"):
        validate_wish_list(empty_box(), PartnerSlot.A, wishes, RULES)


def test_wish_list_duplicate_position():
    wishes = make_wishes(PARTNER_A, "a")
    wishes[11] = wishes[11].model_copy(update={"position": 1})
    with pytest.raises(ValidationError, match="permutation of 1..12"):
        validate_wish_list(empty_box(), PartnerSlot.A, wishes, RULES)


def test_wish_list_position_out_of_range():
    wishes = make_wishes(PARTNER_A, "a")
    wishes[11] = wishes[11].model_copy(update={"position": 13})
    with pytest.raises(ValidationError):
        validate_wish_list(empty_box(), PartnerSlot.A, wishes, RULES)


def test_wish_list_duplicate_ids():
    wishes = make_wishes(PARTNER_A, "a")
    wishes[1] = wishes[1].model_copy(update={"id": "a1"})
    with pytest.raises(ValidationError, match="Duplicate wish ids"):
        validate_wish_list(empty_box(), PartnerSlot.A, wishes, RULES)


def test_wish_list_ids_must_not_clash_with_partner():
    box = empty_box().with_wishes(PartnerSlot.B, WISHES_B)
    clashing = make_wishes(PARTNER_A, "b")
    with pytest.raises(ValidationError, match="other partner"):
        validate_wish_list(box, PartnerSlot.A, clashing, RULES)


def test_wish_list_must_be_authored_by_slot_partner():
    with pytest.raises(ValidationError, match="not authored"):
        validate_wish_list(empty_box(), PartnerSlot.A, make_wishes(PARTNER_B, "a"), RULES)


def test_valid_selection_passes():
    validate_willing_selection(_box_with_lists(), PartnerSlot.A, SELECTION_A, RULES)


def test_selection_wrong_size():
    entries = make_entries(("b1", "easy"), ("b2", "easy"))
    with pytest.raises(ValidationError, match="exactly 3"):
        validate_willing_selection(_box_with_lists(), PartnerSlot.A, entries, RULES)


def test_selection_must_reference_counterpart_wishes():
    # A selecting A's own wish
    entries = make_entries(("b1", "easy"), ("a2", "easy"), ("b3", "easy"))
    with pytest.raises(ValidationError, match="outside the partner's list"):
        validate_willing_selection(_box_with_lists(), PartnerSlot.A, entries, RULES)


def test_selection_unknown_wish():
    entries = make_entries(("b1", "easy"), ("zzz", "easy"), ("b3", "easy"))
    with pytest.raises(ValidationError):
        validate_willing_selection(_box_with_lists(), PartnerSlot.A, entries, RULES)


def test_selection_duplicate_wish():
    entries = make_entries(("b1", "easy"), ("b1", "moderate"), ("b3", "easy"))
    with pytest.raises(ValidationError, match="selected twice"):
        validate_willing_selection(_box_with_lists(), PartnerSlot.A, entries, RULES)


def test_selection_priorities_must_be_permutation():
    entries = make_entries(("b1", "easy"), ("b2", "easy"), ("b3", "easy"))
    entries[2] = entries[2].model_copy(update={"priority": 2})
    with pytest.raises(ValidationError, match="Priorities"):
        validate_willing_selection(_box_with_lists(), PartnerSlot.A, entries, RULES)


def test_guesses_accept_unknown_ids():
    validate_guesses(make_guesses(("nope", "easy")), RULES)


def test_guesses_empty_is_fine():
    validate_guesses([], RULES)


def test_guesses_limited_to_selection_size():
    guesses = make_guesses(("a1", "easy"), ("a2", "easy"), ("a3", "easy"), ("a4", "easy"))
    with pytest.raises(ValidationError, match="At most 3"):
        validate_guesses(guesses, RULES)


def test_guesses_one_per_wish():
    with pytest.raises(ValidationError, match="one guess per wish"):
        validate_guesses(make_guesses(("a1", "easy"), ("a1", "moderate")), RULES)
