"""Item class for trackable things that need periodic maintenance."""

import copy
import uuid
from datetime import datetime
from typing import Optional

from .timestamps import format_timestamp, utcnow

# Preset maintenance intervals offered when creating an item.
MAINTENANCE_OPTIONS = {"5000": 5000, "10000": 10000, "15000": 15000}
CUSTOM_OPTION = "custom"


class Item:
    """
    A tracked item with its last recorded reading and consumption rate.

    Field values are stored as given; nothing is coerced or validated here.
    Records loaded from disk may therefore carry bad values, which the
    estimation calculator tolerates.
    """

    def __init__(
            self,
            id: Optional[str],
            name: str,
            current_reading: float,
            consumption_rate: float,
            consumption_period: str,
            maintenance_threshold: float,
            maintenance_option: str = CUSTOM_OPTION,
            type: str = "distance",
            created_at: Optional[str] = None,
            updated_at: Optional[str] = None,
            manually_adjusted: bool = False,
            manual_estimation: Optional[str] = None,
            is_pinned: bool = False,
            adjustment_offset: float = 0,
    ):
        self.id = id
        self.name = name
        self.type = type
        self.current_reading = current_reading
        self.consumption_rate = consumption_rate
        self.consumption_period = consumption_period
        self.maintenance_threshold = maintenance_threshold
        self.maintenance_option = maintenance_option
        self.created_at = created_at
        self.updated_at = updated_at
        self.manually_adjusted = manually_adjusted or False
        self.manual_estimation = manual_estimation
        self.is_pinned = is_pinned or False
        self.adjustment_offset = adjustment_offset or 0

    def __repr__(self) -> str:
        return f"Item(id={self.id!r}, name={self.name!r})"

    def replace(self, **changes) -> "Item":
        """Return a copy with the given attributes changed."""
        updated = copy.copy(self)
        for name, value in changes.items():
            if not hasattr(updated, name):
                raise AttributeError(f"Item has no field '{name}'")
            setattr(updated, name, value)
        return updated


def threshold_for_option(option: str, custom_threshold: Optional[float] = None) -> Optional[float]:
    """Resolve a maintenance option to its interval; 'custom' uses the given value."""
    if option in MAINTENANCE_OPTIONS:
        return MAINTENANCE_OPTIONS[option]
    if option == CUSTOM_OPTION:
        return custom_threshold
    raise ValueError(f"Unknown maintenance option '{option}'")


def option_for_threshold(threshold: float) -> str:
    """Pick the preset option matching a threshold, or 'custom'."""
    for option, value in MAINTENANCE_OPTIONS.items():
        if threshold == value:
            return option
    return CUSTOM_OPTION


def new_item(
        name: str,
        current_reading: float,
        consumption_rate: float,
        consumption_period: str,
        maintenance_option: str = "10000",
        maintenance_threshold: Optional[float] = None,
        now: Optional[datetime] = None,
) -> Item:
    """Create a fresh item with a new id and both timestamps set to now."""
    stamp = format_timestamp(now or utcnow())
    return Item(
        id=str(uuid.uuid4()),
        name=name,
        current_reading=current_reading,
        consumption_rate=consumption_rate,
        consumption_period=consumption_period,
        maintenance_threshold=threshold_for_option(maintenance_option, maintenance_threshold),
        maintenance_option=maintenance_option,
        type="distance",
        created_at=stamp,
        updated_at=stamp,
        manually_adjusted=False,
        manual_estimation=None,
        adjustment_offset=0,
    )


def record_reading(item: Item, reading: float, now: Optional[datetime] = None) -> Item:
    """
    Make an explicitly observed reading the new projection baseline.

    The adjustment offset is cleared since the observed value already
    reflects reality.
    """
    return item.replace(
        current_reading=reading,
        updated_at=format_timestamp(now or utcnow()),
        adjustment_offset=0,
        manually_adjusted=True,
    )


def apply_adjustment(item: Item, offset: float) -> Item:
    """Store a signed correction to be added to the projected reading."""
    return item.replace(adjustment_offset=offset, manually_adjusted=True)


def toggle_pin(item: Item) -> Item:
    return item.replace(is_pinned=not item.is_pinned)
