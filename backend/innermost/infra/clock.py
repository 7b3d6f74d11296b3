"""Wall-clock time source."""
from datetime import datetime

from innermost.domain.common.types import utcnow


class SystemClock:
    """Clock backed by the system's UTC time."""

    def now(self) -> datetime:
        return utcnow()
