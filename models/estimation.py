"""EstimationResult dataclass for projected maintenance timing."""

from dataclasses import dataclass
from datetime import datetime

from .status import Status


@dataclass(frozen=True)
class EstimationResult:
    """Projected reading and due date for an item at a point in time."""

    days_left: int
    weeks_left: float
    estimated_date: datetime
    estimated_current_reading: float
    next_maintenance_reading: float
    remaining_units: float
    status: Status

    @property
    def is_due(self) -> bool:
        return self.status in (Status.CRITICAL, Status.WARNING)

    def to_dict(self) -> dict:
        """camelCase mapping for JSON output."""
        return {
            "daysLeft": self.days_left,
            "weeksLeft": self.weeks_left,
            "estimatedDate": self.estimated_date.isoformat(),
            "estimatedCurrentReading": self.estimated_current_reading,
            "nextMaintenanceReading": self.next_maintenance_reading,
            "remainingUnits": self.remaining_units,
            "status": self.status.value,
        }
