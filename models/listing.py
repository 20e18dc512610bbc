"""Ordering of items for list views."""

from datetime import datetime
from typing import List, Optional

from .calculations import calculate_estimation, remaining_units
from .item import Item
from .timestamps import parse_timestamp

SORT_METHODS = ("name", "date", "reading", "remaining", "status")
DEFAULT_SORT = "name"


def _created_ts(item: Item) -> float:
    created = parse_timestamp(item.created_at)
    return created.timestamp() if created else 0.0


def _number(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def sort_items(items: List[Item], method: str = DEFAULT_SORT, now: Optional[datetime] = None) -> List[Item]:
    """
    Sort items for display. Pinned items always come first.

    Methods:
        name: alphabetical, case-insensitive
        date: newest created first
        reading: highest recorded reading first
        remaining: fewest units left before maintenance first
        status: most urgent first, then fewest days left

    Unknown methods fall back to name.
    """
    if method == "date":
        def key(item):
            return -_created_ts(item)
    elif method == "reading":
        def key(item):
            return -_number(item.current_reading)
    elif method == "remaining":
        def key(item):
            return remaining_units(item, now)
    elif method == "status":
        def key(item):
            estimation = calculate_estimation(item, now)
            return (estimation.status.urgency, estimation.days_left)
    else:
        def key(item):
            return str(item.name or "").casefold()

    return sorted(items, key=lambda item: (not item.is_pinned, key(item)))
