"""Editing the settings of an existing item."""

from typing import List

from .item import Item, option_for_threshold, threshold_for_option
from .store import item_to_dict
from .validation import validate_item

EDITABLE_FIELDS = (
    "name",
    "consumption_rate",
    "consumption_period",
    "maintenance_threshold",
    "maintenance_option",
)


class InvalidItemError(ValueError):
    """An edit would leave the item failing validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("Invalid item: " + "; ".join(errors))


def edit_item(item: Item, **changes) -> Item:
    """
    Return a copy of the item with its settings changed.

    Only EDITABLE_FIELDS may change. A preset maintenance option sets the
    threshold to the preset's interval; 'custom' keeps the given (or current)
    threshold. The stored option is then derived from the final threshold,
    so a custom 10000 is recorded as the 10000 preset.

    The reading, its timestamp and the adjustment offset are left alone:
    record_reading and apply_adjustment own those.

    Raises:
        ValueError: On a field that can't be edited or an unknown option.
        InvalidItemError: If the edited item fails validation.
    """
    unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValueError(f"Cannot edit field(s): {', '.join(unknown)}")

    option = changes.pop("maintenance_option", None)
    if option is not None:
        custom = changes.get("maintenance_threshold", item.maintenance_threshold)
        changes["maintenance_threshold"] = threshold_for_option(option, custom)

    edited = item.replace(**changes)
    if "maintenance_threshold" in changes:
        edited.maintenance_option = option_for_threshold(edited.maintenance_threshold)

    errors = validate_item(item_to_dict(edited))
    if errors:
        raise InvalidItemError(errors)
    return edited
