"""
Maintenance tracking models.

This package provides data models and calculations for tracked items:
- Status: Urgency levels (CRITICAL, WARNING, NORMAL)
- ConsumptionPeriod: Unit a consumption rate is expressed over
- Item: A tracked item and its last recorded reading
- EstimationResult: Projected maintenance timing
- ItemStore: Persistence contract, with YAML and in-memory implementations
- edit_item: Validated changes to an item's settings
"""

from .status import Status
from .period import ConsumptionPeriod
from .item import (
    Item,
    new_item,
    record_reading,
    apply_adjustment,
    toggle_pin,
    threshold_for_option,
    option_for_threshold,
)
from .estimation import EstimationResult
from .calculations import (
    NEVER_DAYS,
    calculate_estimation,
    project_current_reading,
    classify_status,
    progress_percent,
    remaining_units,
)
from .listing import sort_items
from .store import ItemStore, InMemoryItemStore, YamlItemStore, item_from_dict, item_to_dict
from .validation import validate_item, validate_document
from .editing import EDITABLE_FIELDS, InvalidItemError, edit_item

__all__ = [
    "Status",
    "ConsumptionPeriod",
    "Item",
    "new_item",
    "record_reading",
    "apply_adjustment",
    "toggle_pin",
    "threshold_for_option",
    "option_for_threshold",
    "EstimationResult",
    "NEVER_DAYS",
    "calculate_estimation",
    "project_current_reading",
    "classify_status",
    "progress_percent",
    "remaining_units",
    "sort_items",
    "ItemStore",
    "InMemoryItemStore",
    "YamlItemStore",
    "item_from_dict",
    "item_to_dict",
    "validate_item",
    "validate_document",
    "EDITABLE_FIELDS",
    "InvalidItemError",
    "edit_item",
]
