"""Weekly scoring engine.

Each partner guesses the effort the other committed to. A guess scores when it
names a wish the counterpart actually selected *and* the declared effort matches
exactly: 2 points for the guesser's most-wanted wish, 1 point otherwise. Anything
else scores 0. There is no partial credit for "close" effort levels.

Guesses are user input, so unknown wish ids and missing selections are treated
as non-matches rather than errors.
"""
from typing import Dict, Iterable, List, Optional

from innermost.domain.willing_box.models import (
    Guess,
    GuessOutcome,
    ScoreResult,
    WillingSelection,
    Wish,
)

MOST_WANTED_POINTS = 2
MATCH_POINTS = 1


def _index_wishes(*wish_lists: Iterable[Wish]) -> Dict[str, Wish]:
    index: Dict[str, Wish] = {}
    for wishes in wish_lists:
        for wish in wishes or []:
            index.setdefault(wish.id, wish)
    return index


def score_guesses(
    guesses: Optional[List[Guess]],
    counterpart_selection: Optional[WillingSelection],
    wish_index: Dict[str, Wish],
) -> List[GuessOutcome]:
    """Score one partner's guesses against the counterpart's selection."""
    outcomes: List[GuessOutcome] = []
    seen = set()
    for guess in guesses or []:
        if guess.wish_id in seen:
            continue
        seen.add(guess.wish_id)

        entry = counterpart_selection.entry_for(guess.wish_id) if counterpart_selection else None
        wish = wish_index.get(guess.wish_id)
        most_wanted = bool(wish and wish.is_most_wanted)

        points = 0
        if entry is not None and entry.effort_level == guess.declared_effort:
            points = MOST_WANTED_POINTS if most_wanted else MATCH_POINTS

        outcomes.append(
            GuessOutcome(
                wish_id=guess.wish_id,
                declared_effort=guess.declared_effort,
                actual_effort=entry.effort_level if entry else None,
                is_most_wanted=most_wanted,
                points=points,
            )
        )
    return outcomes


def compute_weekly_score(
    wishes_a: Optional[List[Wish]],
    wishes_b: Optional[List[Wish]],
    selection_a: Optional[WillingSelection],
    selection_b: Optional[WillingSelection],
    guesses_a: Optional[List[Guess]],
    guesses_b: Optional[List[Guess]],
) -> ScoreResult:
    """Compute both partners' scores for one week.

    Partner A's guesses are compared with B's selection and vice versa. B selects
    from A's wishes, so the most-wanted flag for A's guesses is read from A's own
    list (the list the wish originated in).
    """
    outcomes_a = score_guesses(guesses_a, selection_b, _index_wishes(wishes_a, wishes_b))
    outcomes_b = score_guesses(guesses_b, selection_a, _index_wishes(wishes_b, wishes_a))
    return ScoreResult(
        score_a=sum(o.points for o in outcomes_a),
        score_b=sum(o.points for o in outcomes_b),
        outcomes_a=outcomes_a,
        outcomes_b=outcomes_b,
    )
