"""Willing Box database models."""
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from innermost.infra.db.base import Base, JSONBType


class WillingBoxModel(Base):
    """One document per pairing-week. Wish lists and selections are stored as JSON."""

    __tablename__ = "willing_boxes"

    id = Column(String, primary_key=True)
    pairing_id = Column(String, nullable=False, index=True)
    week_number = Column(Integer, nullable=False)
    partner_a_id = Column(String, nullable=False, index=True)
    partner_b_id = Column(String, nullable=False, index=True)
    phase = Column(String, nullable=False, default="planting_trees", index=True)  # cache of the derived phase
    partner_a_wishes = Column(JSONBType, nullable=False, default=list)
    partner_b_wishes = Column(JSONBType, nullable=False, default=list)
    partner_a_selection = Column(JSONBType, nullable=True)  # {"entries": [...], "submitted_at": "..."}
    partner_b_selection = Column(JSONBType, nullable=True)
    is_locked = Column(Boolean, nullable=False, default=False)
    locked_at = Column(DateTime(timezone=True), nullable=True)
    revealed_at = Column(DateTime(timezone=True), nullable=True)
    revision = Column(Integer, nullable=False, default=0)  # compare-and-set token
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_willing_boxes_pairing_week', 'pairing_id', 'week_number', unique=True),
    )


class WeeklyScoreModel(Base):
    """Guesses and final scores for one pairing-week."""

    __tablename__ = "weekly_scores"

    id = Column(String, primary_key=True)  # "{pairing_id}_week_{n}"
    pairing_id = Column(String, nullable=False, index=True)
    week_number = Column(Integer, nullable=False)
    partner_a_id = Column(String, nullable=False)
    partner_b_id = Column(String, nullable=False)
    partner_a_guesses = Column(JSONBType, nullable=False, default=list)
    partner_b_guesses = Column(JSONBType, nullable=False, default=list)
    partner_a_score = Column(Integer, nullable=False, default=0)
    partner_b_score = Column(Integer, nullable=False, default=0)
    is_complete = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    revision = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_weekly_scores_pairing_week', 'pairing_id', 'week_number', unique=True),
    )
