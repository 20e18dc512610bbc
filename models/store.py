"""Item persistence: an abstract store contract and its implementations."""

import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .item import Item
from .timestamps import format_timestamp, utcnow

logger = logging.getLogger(__name__)

# camelCase on-disk key -> Item attribute
_FIELDS = {
    "id": "id",
    "name": "name",
    "type": "type",
    "currentReading": "current_reading",
    "consumptionRate": "consumption_rate",
    "consumptionPeriod": "consumption_period",
    "maintenanceThreshold": "maintenance_threshold",
    "maintenanceOption": "maintenance_option",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "manuallyAdjusted": "manually_adjusted",
    "manualEstimation": "manual_estimation",
    "isPinned": "is_pinned",
    "adjustmentOffset": "adjustment_offset",
}


def item_from_dict(dct: Dict[str, Any]) -> Item:
    """Build an Item from its camelCase mapping. Values are not validated."""
    kwargs = {attr: dct[key] for key, attr in _FIELDS.items() if key in dct}
    kwargs.setdefault("id", None)
    kwargs.setdefault("name", "")
    for attr in ("current_reading", "consumption_rate", "consumption_period", "maintenance_threshold"):
        kwargs.setdefault(attr, None)
    return Item(**kwargs)


def item_to_dict(item: Item) -> Dict[str, Any]:
    """Serialize an Item to its camelCase mapping, omitting unset optionals."""
    d: Dict[str, Any] = {}
    for key, attr in _FIELDS.items():
        value = getattr(item, attr)
        if value is None and key in ("manualEstimation", "createdAt", "updatedAt"):
            continue
        d[key] = value
    return d


class ItemStore(ABC):
    """Persistence contract for item records, keyed by item id."""

    @abstractmethod
    def get(self, item_id: str) -> Optional[Item]:
        """Return the item with this id, or None."""

    @abstractmethod
    def list(self) -> List[Item]:
        """Return every stored item in insertion order."""

    @abstractmethod
    def put(self, item: Item) -> Item:
        """Insert or replace an item by id and return the stored record."""

    @abstractmethod
    def delete(self, item_id: str) -> bool:
        """Remove an item. Returns False if there was nothing to remove."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every item."""

    def _prepare(self, item: Item) -> Item:
        """Fill in id and timestamps for records that don't have them yet."""
        changes = {}
        if not item.id:
            changes["id"] = str(uuid.uuid4())
        if not item.created_at or not item.updated_at:
            stamp = format_timestamp(utcnow())
            if not item.created_at:
                changes["created_at"] = stamp
            if not item.updated_at:
                changes["updated_at"] = stamp
        return item.replace(**changes) if changes else item


class InMemoryItemStore(ItemStore):
    """Dict-backed store, for tests and embedding."""

    def __init__(self, items: Optional[List[Item]] = None):
        self._items: Dict[str, Item] = {}
        for item in items or []:
            self.put(item)

    def get(self, item_id: str) -> Optional[Item]:
        return self._items.get(item_id)

    def list(self) -> List[Item]:
        return list(self._items.values())

    def put(self, item: Item) -> Item:
        stored = self._prepare(item)
        self._items[stored.id] = stored
        return stored

    def delete(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None

    def clear(self) -> None:
        self._items.clear()


class YamlItemStore(ItemStore):
    """
    Store backed by a YAML document holding a flat list under `items`.

    Every write loads the raw document, modifies the list, and writes the
    whole document back. A missing file reads as an empty store.
    """

    def __init__(self, filename: Union[str, Path]):
        self.path = Path(filename)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"items": []}
        with open(self.path, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader)
        if data is None:
            return {"items": []}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: expected a mapping at top level")
        if data.get("items") is None:
            data["items"] = []
        if not isinstance(data["items"], list):
            raise ValueError(f"{self.path}: 'items' must be a list")
        for index, dct in enumerate(data["items"]):
            if not isinstance(dct, dict):
                raise ValueError(f"{self.path}: items[{index}] is not a mapping")
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        with open(self.path, "w") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )

    def get(self, item_id: str) -> Optional[Item]:
        for dct in self._load()["items"]:
            if dct.get("id") == item_id:
                return item_from_dict(dct)
        return None

    def list(self) -> List[Item]:
        return [item_from_dict(dct) for dct in self._load()["items"]]

    def put(self, item: Item) -> Item:
        stored = self._prepare(item)
        data = self._load()
        items = data["items"]
        entry = item_to_dict(stored)
        for index, dct in enumerate(items):
            if dct.get("id") == stored.id:
                items[index] = entry
                break
        else:
            items.append(entry)
        self._save(data)
        logger.debug("Saved item %s to %s", stored.id, self.path)
        return stored

    def delete(self, item_id: str) -> bool:
        data = self._load()
        remaining = [dct for dct in data["items"] if dct.get("id") != item_id]
        if len(remaining) == len(data["items"]):
            return False
        data["items"] = remaining
        self._save(data)
        logger.debug("Deleted item %s from %s", item_id, self.path)
        return True

    def clear(self) -> None:
        data = self._load() if self.path.exists() else {}
        data["items"] = []
        self._save(data)
