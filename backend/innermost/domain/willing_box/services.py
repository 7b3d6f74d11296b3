"""Willing Box domain services."""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from innermost.domain.common.errors import ConflictError, InvalidPhaseError, NotFoundError, ValidationError
from innermost.domain.willing_box.cycle import (
    apply_guesses,
    apply_reveal,
    apply_willing_selection,
    apply_wish_list,
    finalize_score,
    new_willing_box,
)
from innermost.domain.willing_box.models import (
    CycleRules,
    Guess,
    PartnerSlot,
    Phase,
    ScoreResult,
    WeeklyScore,
    WillingBox,
    WillingEntry,
    Wish,
)
from innermost.domain.willing_box.phases import derive_phase, with_derived_phase
from innermost.domain.willing_box.progress import (
    PairingStats,
    PartnerStatus,
    next_action,
    pairing_stats,
)
from innermost.domain.willing_box.repositories import (
    Clock,
    WeeklyScoreRepository,
    WillingBoxRepository,
)
from innermost.domain.willing_box.scoring import compute_weekly_score

logger = logging.getLogger(__name__)

BoxTransition = Callable[[WillingBox, datetime], WillingBox]


class WillingBoxService:
    """Runs the weekly willing-box cycle against the storage collaborator.

    Every write is read -> pure transition -> compare-and-set. A stale write
    re-reads the box and re-applies the same transition, so two partners writing
    at once never overwrite each other's slot and the lock happens exactly once.
    """

    def __init__(
        self,
        box_repo: WillingBoxRepository,
        score_repo: WeeklyScoreRepository,
        clock: Clock,
        rules: Optional[CycleRules] = None,
        max_write_attempts: int = 5,
    ):
        self.box_repo = box_repo
        self.score_repo = score_repo
        self.clock = clock
        self.rules = rules or CycleRules()
        self.max_write_attempts = max_write_attempts

    # Reads

    async def get_willing_box(self, box_id: str) -> WillingBox:
        """Get a box by id, applying the reveal rule first."""
        return await self.refresh(box_id)

    async def get_active_willing_box(self, pairing_id: str) -> Optional[WillingBox]:
        """Get the pairing's non-revealed box, or None."""
        box = await self.box_repo.get_active(pairing_id)
        if box is None:
            return None
        box = await self.refresh(box.id)
        return None if derive_phase(box, self.rules) is Phase.REVEALED else box

    async def get_current_willing_box(self, pairing_id: str) -> Optional[WillingBox]:
        """Get the pairing's most recent box, revealed or not."""
        box = await self.box_repo.get_latest(pairing_id)
        if box is None:
            return None
        return await self.refresh(box.id)

    async def get_weekly_score(self, pairing_id: str, week_number: int) -> Optional[WeeklyScore]:
        await self._refresh_latest(pairing_id)
        return await self.score_repo.get(pairing_id, week_number)

    async def list_weekly_scores(self, pairing_id: str) -> List[WeeklyScore]:
        await self._refresh_latest(pairing_id)
        return await self.score_repo.list_for_pairing(pairing_id)

    async def get_score_breakdown(self, box_id: str) -> ScoreResult:
        """Per-guess scoring for a revealed week."""
        box = await self.refresh(box_id)
        phase = derive_phase(box, self.rules)
        if phase is not Phase.REVEALED:
            raise InvalidPhaseError(
                f"Results for willing box {box_id} are hidden until reveal",
                expected=Phase.REVEALED.value,
                actual=phase.value,
            )
        score = await self.score_repo.get(box.pairing_id, box.week_number)
        return compute_weekly_score(
            box.partner_a_wishes,
            box.partner_b_wishes,
            box.partner_a_selection,
            box.partner_b_selection,
            score.partner_a_guesses if score else [],
            score.partner_b_guesses if score else [],
        )

    async def get_partner_status(self, box_id: str, slot: PartnerSlot) -> PartnerStatus:
        box = await self.refresh(box_id)
        score = await self.score_repo.get(box.pairing_id, box.week_number)
        return next_action(box, slot, score)

    async def get_pairing_stats(self, pairing_id: str, slot: PartnerSlot) -> PairingStats:
        scores = await self.list_weekly_scores(pairing_id)
        return pairing_stats(scores, slot, weeks_per_tree=self.rules.weeks_per_tree)

    # Week progression

    async def start_week(
        self,
        pairing_id: str,
        partner_a_id: Optional[str] = None,
        partner_b_id: Optional[str] = None,
    ) -> WillingBox:
        """Start week 1, or the week after the latest revealed one.

        Partner ids are carried forward from the previous week when there is one.
        """
        latest = await self.box_repo.get_latest(pairing_id)
        if latest is None:
            if not partner_a_id or not partner_b_id:
                raise ValidationError("Both partner ids are required to start a pairing's first week")
            week_number = 1
        else:
            latest = await self.refresh(latest.id)
            phase = derive_phase(latest, self.rules)
            if phase is not Phase.REVEALED:
                raise ConflictError(
                    f"Pairing {pairing_id} already has an active willing box "
                    f"(week {latest.week_number}, phase {phase.value})"
                )
            week_number = latest.week_number + 1
            partner_a_id, partner_b_id = latest.partner_a_id, latest.partner_b_id

        box = new_willing_box(pairing_id, partner_a_id, partner_b_id, week_number, self.clock.now())
        created = await self.box_repo.create(box)
        logger.info("Started willing box %s for pairing %s week %d", created.id, pairing_id, week_number)
        return created

    async def open_week(
        self,
        pairing_id: str,
        partner_a_id: Optional[str] = None,
        partner_b_id: Optional[str] = None,
    ) -> WillingBox:
        """Return the active box, starting the next week if the last one is revealed."""
        active = await self.get_active_willing_box(pairing_id)
        if active is not None:
            return active
        try:
            return await self.start_week(pairing_id, partner_a_id, partner_b_id)
        except ConflictError:
            # Another session started the week between our read and write.
            active = await self.get_active_willing_box(pairing_id)
            if active is None:
                raise
            return active

    # Submissions

    async def submit_wish_list(self, box_id: str, slot: PartnerSlot, wishes: List[Wish]) -> WillingBox:
        return await self._mutate_box(
            box_id,
            lambda box, now: apply_wish_list(box, slot, wishes, now, self.rules),
            f"wish list from partner {slot.value}",
        )

    async def submit_willing_selection(
        self, box_id: str, slot: PartnerSlot, entries: List[WillingEntry]
    ) -> WillingBox:
        return await self._mutate_box(
            box_id,
            lambda box, now: apply_willing_selection(box, slot, entries, now, self.rules),
            f"willing selection from partner {slot.value}",
        )

    async def submit_guesses(self, box_id: str, slot: PartnerSlot, guesses: List[Guess]) -> WeeklyScore:
        """Record (or replace) a partner's guesses while the box is guessing."""
        box = await self.refresh(box_id)
        for attempt in range(1, self.max_write_attempts + 1):
            now = self.clock.now()
            current = apply_reveal(box, now, self.rules)
            existing = await self.score_repo.get(box.pairing_id, box.week_number)
            updated = apply_guesses(existing, current, slot, guesses, now, self.rules)
            if await self._write_score(existing, updated):
                logger.info(
                    "Recorded %d guesses from partner %s for pairing %s week %d",
                    len(guesses), slot.value, box.pairing_id, box.week_number,
                )
                return updated.model_copy(update={"revision": self._next_revision(existing)})
            logger.warning(
                "Stale write on weekly score %s (attempt %d/%d), retrying",
                updated.id, attempt, self.max_write_attempts,
            )
        raise ConflictError(f"Could not record guesses for willing box {box_id}: too many concurrent writes")

    async def refresh(self, box_id: str) -> WillingBox:
        """Apply the time-based reveal rule and finalize scores once revealed."""
        box = await self._mutate_box(
            box_id,
            lambda box, now: apply_reveal(box, now, self.rules),
            "reveal check",
        )
        if derive_phase(box, self.rules) is Phase.REVEALED:
            await self._finalize(box)
        return box

    # Internals

    async def _load(self, box_id: str) -> WillingBox:
        box = await self.box_repo.get_by_id(box_id)
        if box is None:
            raise NotFoundError("WillingBox", box_id)
        return with_derived_phase(box, self.rules)

    async def _refresh_latest(self, pairing_id: str) -> None:
        """Apply the reveal rule to the pairing's newest week before reading its scores."""
        latest = await self.box_repo.get_latest(pairing_id)
        if latest is not None:
            await self.refresh(latest.id)

    async def _mutate_box(self, box_id: str, transition: BoxTransition, action: str) -> WillingBox:
        for attempt in range(1, self.max_write_attempts + 1):
            box = await self._load(box_id)
            updated = transition(box, self.clock.now())
            if updated is box:
                return box
            if await self.box_repo.update(updated, expected_revision=box.revision):
                stored = updated.model_copy(update={"revision": box.revision + 1})
                self._log_transition(box, stored, action)
                return stored
            logger.warning(
                "Stale write on willing box %s during %s (attempt %d/%d), retrying",
                box_id, action, attempt, self.max_write_attempts,
            )
        raise ConflictError(f"Could not apply {action} to willing box {box_id}: too many concurrent writes")

    async def _finalize(self, box: WillingBox) -> WeeklyScore:
        for attempt in range(1, self.max_write_attempts + 1):
            existing = await self.score_repo.get(box.pairing_id, box.week_number)
            if existing is not None and existing.is_complete:
                return existing
            final = finalize_score(existing, box, self.clock.now(), self.rules)
            if await self._write_score(existing, final):
                logger.info(
                    "Finalized weekly score %s: A=%d B=%d",
                    final.id, final.partner_a_score, final.partner_b_score,
                )
                return final.model_copy(update={"revision": self._next_revision(existing)})
            logger.warning(
                "Stale write finalizing weekly score %s (attempt %d/%d), retrying",
                final.id, attempt, self.max_write_attempts,
            )
        raise ConflictError(f"Could not finalize weekly score for willing box {box.id}: too many concurrent writes")

    async def _write_score(self, existing: Optional[WeeklyScore], updated: WeeklyScore) -> bool:
        if existing is None:
            try:
                await self.score_repo.create(updated)
            except ConflictError:
                return False
            return True
        return await self.score_repo.update(updated, expected_revision=existing.revision)

    @staticmethod
    def _next_revision(existing: Optional[WeeklyScore]) -> int:
        return 0 if existing is None else existing.revision + 1

    @staticmethod
    def _log_transition(before: WillingBox, after: WillingBox, action: str) -> None:
        if before.phase is not after.phase:
            logger.info(
                "Willing box %s (pairing %s week %d) moved %s -> %s after %s",
                after.id, after.pairing_id, after.week_number,
                before.phase.value, after.phase.value, action,
            )
        if after.is_locked and not before.is_locked:
            logger.info("Willing box %s locked at %s", after.id, after.locked_at)
        if before.phase is after.phase:
            logger.debug("Willing box %s updated by %s (revision %d)", after.id, action, after.revision)
