"""Status enum for maintenance urgency levels."""

from enum import Enum


class Status(Enum):
    """Maintenance urgency derived from the days left until service."""

    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"

    @property
    def urgency(self) -> int:
        """Sort rank. Lower = more urgent."""
        return _URGENCY[self]


_URGENCY = {Status.CRITICAL: 1, Status.WARNING: 2, Status.NORMAL: 3}
