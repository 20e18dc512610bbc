#!/usr/bin/env python3
"""Tests for Item and the functions that derive updated items."""
import pytest
from datetime import datetime, timezone

from models import (
    Item,
    apply_adjustment,
    new_item,
    option_for_threshold,
    record_reading,
    threshold_for_option,
    toggle_pin,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def item():
    return Item(
        id="car-1",
        name="Family car",
        current_reading=10000,
        consumption_rate=700,
        consumption_period="weekly",
        maintenance_threshold=5000,
        updated_at="2025-05-01T00:00:00.000Z",
        adjustment_offset=150,
    )


class TestItem:
    """Tests for Item construction and copying."""

    def test_defaults(self):
        item = Item(None, "Bike", 0, 10, "daily", 500)
        assert item.type == "distance"
        assert item.maintenance_option == "custom"
        assert item.is_pinned is False
        assert item.manually_adjusted is False
        assert item.adjustment_offset == 0

    def test_none_flags_become_defaults(self):
        item = Item(None, "Bike", 0, 10, "daily", 500, is_pinned=None, adjustment_offset=None)
        assert item.is_pinned is False
        assert item.adjustment_offset == 0

    def test_replace_returns_copy(self, item):
        changed = item.replace(name="Van")
        assert changed.name == "Van"
        assert item.name == "Family car"
        assert changed.id == item.id

    def test_replace_unknown_field_raises(self, item):
        with pytest.raises(AttributeError):
            item.replace(colour="red")


class TestMaintenanceOptions:
    """Tests for option/threshold mapping."""

    def test_presets(self):
        assert threshold_for_option("5000") == 5000
        assert threshold_for_option("10000") == 10000
        assert threshold_for_option("15000") == 15000

    def test_custom_uses_given(self):
        assert threshold_for_option("custom", 7500) == 7500

    def test_unknown_option_raises(self):
        with pytest.raises(ValueError):
            threshold_for_option("20000")

    def test_option_for_threshold(self):
        assert option_for_threshold(15000) == "15000"
        assert option_for_threshold(7500) == "custom"


class TestNewItem:
    """Tests for new_item."""

    def test_sets_identity_and_timestamps(self):
        item = new_item("Family car", 10000, 700, "weekly", "5000", now=NOW)
        assert item.id
        assert item.created_at == item.updated_at == "2025-06-01T12:00:00.000Z"
        assert item.maintenance_threshold == 5000
        assert item.maintenance_option == "5000"
        assert item.adjustment_offset == 0
        assert item.manually_adjusted is False
        assert item.manual_estimation is None

    def test_custom_threshold(self):
        item = new_item("Boat", 120, 3, "monthly", "custom", 50, now=NOW)
        assert item.maintenance_threshold == 50

    def test_ids_are_unique(self):
        first = new_item("A car", 1, 1, "daily", now=NOW)
        second = new_item("A car", 1, 1, "daily", now=NOW)
        assert first.id != second.id


class TestReadingUpdates:
    """Tests for record_reading, apply_adjustment, toggle_pin."""

    def test_record_reading_resets_baseline(self, item):
        updated = record_reading(item, 12345, NOW)
        assert updated.current_reading == 12345
        assert updated.updated_at == "2025-06-01T12:00:00.000Z"
        assert updated.adjustment_offset == 0
        assert updated.manually_adjusted is True

    def test_record_reading_leaves_original(self, item):
        record_reading(item, 12345, NOW)
        assert item.current_reading == 10000
        assert item.adjustment_offset == 150

    def test_apply_adjustment_keeps_baseline(self, item):
        adjusted = apply_adjustment(item, -300)
        assert adjusted.adjustment_offset == -300
        assert adjusted.current_reading == 10000
        assert adjusted.updated_at == item.updated_at
        assert adjusted.manually_adjusted is True

    def test_toggle_pin(self, item):
        pinned = toggle_pin(item)
        assert pinned.is_pinned is True
        assert toggle_pin(pinned).is_pinned is False
        assert item.is_pinned is False
