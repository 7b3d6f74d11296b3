"""Database models."""
from innermost.infra.db.models.willing_box import WeeklyScoreModel, WillingBoxModel

__all__ = [
    "WillingBoxModel",
    "WeeklyScoreModel",
]
