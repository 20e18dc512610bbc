"""Consumption period enum."""

from enum import Enum
from typing import Optional


class ConsumptionPeriod(Enum):
    """Unit of time a consumption rate is expressed over."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def days(self) -> int:
        return _DAYS[self]

    @property
    def hours(self) -> int:
        return self.days * 24

    @classmethod
    def parse(cls, value) -> Optional["ConsumptionPeriod"]:
        """Return the matching period, or None for anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


# A month is 30 days throughout.
_DAYS = {
    ConsumptionPeriod.DAILY: 1,
    ConsumptionPeriod.WEEKLY: 7,
    ConsumptionPeriod.MONTHLY: 30,
}
