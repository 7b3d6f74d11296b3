"""Willing Box repository implementation."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from innermost.domain.common.errors import ConflictError
from innermost.domain.willing_box.models import WeeklyScore, WillingBox
from innermost.domain.willing_box.phases import with_derived_phase
from innermost.domain.willing_box.repositories import (
    WeeklyScoreRepository,
    WillingBoxRepository,
)
from innermost.infra.db.legacy_fields import weekly_score_fields, willing_box_fields
from innermost.infra.db.models.willing_box import WeeklyScoreModel, WillingBoxModel

logger = logging.getLogger(__name__)


def _dump_list(items) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


def _box_values(box: WillingBox) -> Dict[str, Any]:
    return {
        "pairing_id": box.pairing_id,
        "week_number": box.week_number,
        "partner_a_id": box.partner_a_id,
        "partner_b_id": box.partner_b_id,
        "phase": box.phase.value,
        "partner_a_wishes": _dump_list(box.partner_a_wishes),
        "partner_b_wishes": _dump_list(box.partner_b_wishes),
        "partner_a_selection": box.partner_a_selection.model_dump(mode="json") if box.partner_a_selection else None,
        "partner_b_selection": box.partner_b_selection.model_dump(mode="json") if box.partner_b_selection else None,
        "is_locked": box.is_locked,
        "locked_at": box.locked_at,
        "revealed_at": box.revealed_at,
        "created_at": box.created_at,
        "updated_at": box.updated_at,
    }


def _box_from_model(model: WillingBoxModel) -> WillingBox:
    fields = willing_box_fields(
        {
            "id": model.id,
            "pairing_id": model.pairing_id,
            "partner_a_id": model.partner_a_id,
            "partner_b_id": model.partner_b_id,
            "week_number": model.week_number,
            "partner_a_wishes": model.partner_a_wishes,
            "partner_b_wishes": model.partner_b_wishes,
            "partner_a_selection": model.partner_a_selection,
            "partner_b_selection": model.partner_b_selection,
            "locked_at": model.locked_at,
            "revealed_at": model.revealed_at,
            "created_at": model.created_at,
            "updated_at": model.updated_at,
        }
    )
    # The phase and is_locked columns are only a cache; re-derive from the data.
    return with_derived_phase(WillingBox(**fields, revision=model.revision))


def _score_values(score: WeeklyScore) -> Dict[str, Any]:
    return {
        "pairing_id": score.pairing_id,
        "week_number": score.week_number,
        "partner_a_id": score.partner_a_id,
        "partner_b_id": score.partner_b_id,
        "partner_a_guesses": _dump_list(score.partner_a_guesses),
        "partner_b_guesses": _dump_list(score.partner_b_guesses),
        "partner_a_score": score.partner_a_score,
        "partner_b_score": score.partner_b_score,
        "is_complete": score.is_complete,
        "completed_at": score.completed_at,
        "created_at": score.created_at,
        "updated_at": score.updated_at,
    }


def _score_from_model(model: WeeklyScoreModel) -> WeeklyScore:
    fields = weekly_score_fields(
        {
            "id": model.id,
            "pairing_id": model.pairing_id,
            "week_number": model.week_number,
            "partner_a_id": model.partner_a_id,
            "partner_b_id": model.partner_b_id,
            "partner_a_guesses": model.partner_a_guesses,
            "partner_b_guesses": model.partner_b_guesses,
            "partner_a_score": model.partner_a_score,
            "partner_b_score": model.partner_b_score,
            "is_complete": model.is_complete,
            "completed_at": model.completed_at,
            "created_at": model.created_at,
            "updated_at": model.updated_at,
        }
    )
    return WeeklyScore(**fields, revision=model.revision)


class WillingBoxRepositoryImpl(WillingBoxRepository):
    """Willing box repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, box_id: str) -> Optional[WillingBox]:
        """Get willing box by ID."""
        result = await self.session.execute(
            select(WillingBoxModel)
            .where(WillingBoxModel.id == box_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _box_from_model(model) if model else None

    async def get_active(self, pairing_id: str) -> Optional[WillingBox]:
        """Get the pairing's non-revealed box, if any."""
        result = await self.session.execute(
            select(WillingBoxModel)
            .where(
                WillingBoxModel.pairing_id == pairing_id,
                WillingBoxModel.revealed_at.is_(None),
            )
            .order_by(WillingBoxModel.week_number.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _box_from_model(model) if model else None

    async def get_latest(self, pairing_id: str) -> Optional[WillingBox]:
        """Get the pairing's box with the highest week number."""
        result = await self.session.execute(
            select(WillingBoxModel)
            .where(WillingBoxModel.pairing_id == pairing_id)
            .order_by(WillingBoxModel.week_number.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _box_from_model(model) if model else None

    async def create(self, box: WillingBox) -> WillingBox:
        """Insert a new box."""
        stmt = insert(WillingBoxModel).values(id=box.id, revision=box.revision, **_box_values(box))
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Duplicate willing box for pairing %s week %d: %s", box.pairing_id, box.week_number, e)
            raise ConflictError(
                f"Pairing {box.pairing_id} already has a willing box for week {box.week_number}"
            ) from e
        return box

    async def update(self, box: WillingBox, expected_revision: int) -> bool:
        """Write ``box`` only if the stored revision is still ``expected_revision``."""
        result = await self.session.execute(
            update(WillingBoxModel)
            .where(
                WillingBoxModel.id == box.id,
                WillingBoxModel.revision == expected_revision,
            )
            .values(revision=expected_revision + 1, **_box_values(box))
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1


class WeeklyScoreRepositoryImpl(WeeklyScoreRepository):
    """Weekly score repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, pairing_id: str, week_number: int) -> Optional[WeeklyScore]:
        """Get the score for a pairing-week."""
        result = await self.session.execute(
            select(WeeklyScoreModel)
            .where(
                WeeklyScoreModel.pairing_id == pairing_id,
                WeeklyScoreModel.week_number == week_number,
            )
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _score_from_model(model) if model else None

    async def list_for_pairing(self, pairing_id: str) -> List[WeeklyScore]:
        """Get all scores for a pairing ordered by week number."""
        result = await self.session.execute(
            select(WeeklyScoreModel)
            .where(WeeklyScoreModel.pairing_id == pairing_id)
            .order_by(WeeklyScoreModel.week_number.asc())
            .execution_options(populate_existing=True)
        )
        return [_score_from_model(m) for m in result.scalars().all()]

    async def create(self, score: WeeklyScore) -> WeeklyScore:
        """Insert a new score."""
        stmt = insert(WeeklyScoreModel).values(id=score.id, revision=score.revision, **_score_values(score))
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(
                f"Pairing {score.pairing_id} already has a weekly score for week {score.week_number}"
            ) from e
        return score

    async def update(self, score: WeeklyScore, expected_revision: int) -> bool:
        """Write ``score`` only if the stored revision is still ``expected_revision``."""
        result = await self.session.execute(
            update(WeeklyScoreModel)
            .where(
                WeeklyScoreModel.id == score.id,
                WeeklyScoreModel.revision == expected_revision,
            )
            .values(revision=expected_revision + 1, **_score_values(score))
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1
