"""Translation of historical document shapes into the canonical models.

Older documents used camelCase keys and, for some concepts, two different names
(``wantId``/``wishId``, ``partnerAWishList``/``partnerAWishlist``,
``partnerAWillingList``/``partnerAWilling``, ``effort``/``effortLevel``).
Everything is collapsed to one canonical field here so the domain never sees
the old names.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from innermost.domain.common.types import as_utc
from innermost.domain.willing_box.models import (
    Guess,
    WillingEntry,
    WillingSelection,
    Wish,
)

_CATEGORY_ALIASES = {"time": "time-together", "time_together": "time-together"}


def _first(doc: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in doc and doc[key] is not None:
            return doc[key]
    return default


def _timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


def wish_from_document(doc: Dict[str, Any]) -> Wish:
    category = str(_first(doc, "category", default="personal")).lower()
    return Wish(
        id=_first(doc, "id"),
        description=_first(doc, "description", "text", default=""),
        category=_CATEGORY_ALIASES.get(category, category),
        is_most_wanted=bool(_first(doc, "is_most_wanted", "isMostWanted", default=False)),
        position=int(_first(doc, "position", "order")),
        author_id=_first(doc, "author_id", "createdBy", "authorId"),
    )


def entry_from_document(doc: Dict[str, Any]) -> WillingEntry:
    return WillingEntry(
        wish_id=_first(doc, "wish_id", "wishId", "wantId"),
        priority=int(_first(doc, "priority")),
        effort_level=_first(doc, "effort_level", "effortLevel", "effort"),
    )


def guess_from_document(doc: Dict[str, Any]) -> Guess:
    return Guess(
        wish_id=_first(doc, "wish_id", "wishId", "wantId"),
        declared_effort=str(_first(doc, "declared_effort", "declaredEffort", "effort")).strip().lower(),
    )


def wishes_from_documents(docs: Optional[List[Dict[str, Any]]]) -> List[Wish]:
    return [wish_from_document(d) for d in docs or []]


def guesses_from_documents(docs: Optional[List[Dict[str, Any]]]) -> List[Guess]:
    return [guess_from_document(d) for d in docs or []]


def selection_from_document(doc: Any, fallback_submitted_at: Optional[datetime] = None) -> Optional[WillingSelection]:
    """Accept either the canonical ``{"entries", "submitted_at"}`` shape or a bare legacy entry list."""
    if not doc:
        return None
    if isinstance(doc, list):
        entries, submitted_at = doc, fallback_submitted_at
    else:
        entries = _first(doc, "entries", default=[])
        submitted_at = _timestamp(_first(doc, "submitted_at", "submittedAt")) or fallback_submitted_at
    if submitted_at is None:
        raise ValueError("Willing selection document has no submission time")
    return WillingSelection(
        entries=[entry_from_document(e) for e in entries],
        submitted_at=submitted_at,
    )


def willing_box_fields(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Map a stored willing-box document (old or new naming) to WillingBox keyword arguments.

    The stored ``status``/``phase`` value is deliberately dropped; callers re-derive it.
    """
    created_at = _timestamp(_first(doc, "created_at", "createdAt"))
    locked_at = _timestamp(_first(doc, "locked_at", "lockedAt"))
    fallback = locked_at or created_at
    return {
        "id": _first(doc, "id"),
        "pairing_id": _first(doc, "pairing_id", "innermostId", "pairingId"),
        "partner_a_id": _first(doc, "partner_a_id", "partnerA"),
        "partner_b_id": _first(doc, "partner_b_id", "partnerB"),
        "week_number": int(_first(doc, "week_number", "weekNumber", default=1)),
        "partner_a_wishes": wishes_from_documents(
            _first(doc, "partner_a_wishes", "partnerAWishList", "partnerAWishlist")
        ),
        "partner_b_wishes": wishes_from_documents(
            _first(doc, "partner_b_wishes", "partnerBWishList", "partnerBWishlist")
        ),
        "partner_a_selection": selection_from_document(
            _first(doc, "partner_a_selection", "partnerAWillingList", "partnerAWilling"), fallback
        ),
        "partner_b_selection": selection_from_document(
            _first(doc, "partner_b_selection", "partnerBWillingList", "partnerBWilling"), fallback
        ),
        "locked_at": locked_at,
        "revealed_at": _timestamp(_first(doc, "revealed_at", "revealedAt")),
        "created_at": created_at,
        "updated_at": _timestamp(_first(doc, "updated_at", "updatedAt")) or created_at,
    }


def weekly_score_fields(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Map a stored weekly-score document to WeeklyScore keyword arguments."""
    created_at = _timestamp(_first(doc, "created_at", "createdAt", "completedAt", "completed_at"))
    return {
        "id": _first(doc, "id"),
        "pairing_id": _first(doc, "pairing_id", "innermostId", "pairingId"),
        "week_number": int(_first(doc, "week_number", "weekNumber")),
        "partner_a_id": _first(doc, "partner_a_id", "partnerA"),
        "partner_b_id": _first(doc, "partner_b_id", "partnerB"),
        "partner_a_guesses": guesses_from_documents(_first(doc, "partner_a_guesses", "partnerAGuesses")),
        "partner_b_guesses": guesses_from_documents(_first(doc, "partner_b_guesses", "partnerBGuesses")),
        "partner_a_score": int(_first(doc, "partner_a_score", "partnerAScore", default=0)),
        "partner_b_score": int(_first(doc, "partner_b_score", "partnerBScore", default=0)),
        "is_complete": bool(_first(doc, "is_complete", "isComplete", default=False)),
        "completed_at": _timestamp(_first(doc, "completed_at", "completedAt")),
        "created_at": created_at,
        "updated_at": _timestamp(_first(doc, "updated_at", "updatedAt")) or created_at,
    }
