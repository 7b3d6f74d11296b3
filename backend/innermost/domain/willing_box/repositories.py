"""Willing Box repository protocols."""
from datetime import datetime
from typing import List, Optional, Protocol

from innermost.domain.willing_box.models import WeeklyScore, WillingBox


class WillingBoxRepository(Protocol):
    """Repository protocol for willing boxes (one document per pairing-week)."""

    async def get_by_id(self, box_id: str) -> Optional[WillingBox]:
        """Get willing box by ID."""
        ...

    async def get_active(self, pairing_id: str) -> Optional[WillingBox]:
        """Get the pairing's non-revealed box, if any."""
        ...

    async def get_latest(self, pairing_id: str) -> Optional[WillingBox]:
        """Get the pairing's box with the highest week number."""
        ...

    async def create(self, box: WillingBox) -> WillingBox:
        """Insert a new box. Raises ConflictError if the pairing-week already exists."""
        ...

    async def update(self, box: WillingBox, expected_revision: int) -> bool:
        """Compare-and-set write.

        Stores ``box`` with revision ``expected_revision + 1`` only if the stored
        revision still equals ``expected_revision``. Returns False on a stale write.
        """
        ...


class WeeklyScoreRepository(Protocol):
    """Repository protocol for weekly scores."""

    async def get(self, pairing_id: str, week_number: int) -> Optional[WeeklyScore]:
        """Get the score for a pairing-week."""
        ...

    async def list_for_pairing(self, pairing_id: str) -> List[WeeklyScore]:
        """Get all scores for a pairing ordered by week number."""
        ...

    async def create(self, score: WeeklyScore) -> WeeklyScore:
        """Insert a new score. Raises ConflictError if the pairing-week already exists."""
        ...

    async def update(self, score: WeeklyScore, expected_revision: int) -> bool:
        """Compare-and-set write, same contract as WillingBoxRepository.update."""
        ...


class Clock(Protocol):
    """Injected time source."""

    def now(self) -> datetime:
        """Current timezone-aware UTC time."""
        ...
