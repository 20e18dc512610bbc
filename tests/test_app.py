#!/usr/bin/env python3
"""Tests for the Flask JSON API."""
import pytest

from models import InMemoryItemStore, Item, YamlItemStore
from models.timestamps import format_timestamp, utcnow
from web.app import app


def make_item(item_id, name, rate, period, threshold, **overrides) -> Item:
    return Item(
        id=item_id,
        name=name,
        current_reading=overrides.pop("current_reading", 10000),
        consumption_rate=rate,
        consumption_period=period,
        maintenance_threshold=threshold,
        created_at=format_timestamp(utcnow()),
        updated_at=format_timestamp(utcnow()),
        **overrides,
    )


@pytest.fixture
def store():
    return InMemoryItemStore([
        make_item("car-1", "Family car", 700, "weekly", 5000),
        make_item("bike-1", "Bike", 100, "daily", 500, current_reading=2000),
        make_item("boat-1", "Boat", 200, "daily", 5000, current_reading=0),
    ])


@pytest.fixture
def client(store):
    app.config["TESTING"] = True
    app.config["ITEM_STORE"] = store
    app.config["ITEMS_SORT"] = "name"
    with app.test_client() as client:
        yield client
    app.config["ITEM_STORE"] = None


class TestIndex:
    def test_counts(self, client):
        data = client.get("/").get_json()
        assert data["total"] == 3
        assert data["counts"] == {"critical": 1, "warning": 1, "normal": 1}
        assert data["pinned"] == []
        assert data["due"] == ["bike-1", "boat-1"]


class TestListItems:
    """Tests for GET /items."""

    def test_sorted_by_name(self, client):
        data = client.get("/items").get_json()
        assert [i["name"] for i in data["items"]] == ["Bike", "Boat", "Family car"]
        assert data["sort"] == "name"

    def test_includes_estimation(self, client):
        car = next(i for i in client.get("/items").get_json()["items"] if i["id"] == "car-1")
        assert car["estimation"]["daysLeft"] == 50
        assert car["estimation"]["status"] == "normal"
        assert car["estimation"]["nextMaintenanceReading"] == 15000
        assert car["estimatedReading"] == 10000
        assert car["progress"] == 0

    def test_sort_param(self, client):
        data = client.get("/items?sort=reading").get_json()
        assert [i["id"] for i in data["items"]] == ["car-1", "bike-1", "boat-1"]

    def test_status_filter(self, client):
        data = client.get("/items?status=critical").get_json()
        assert [i["id"] for i in data["items"]] == ["bike-1"]

    def test_tiny_rate_listed(self, client, store):
        store.put(make_item("clock-1", "Clock", 0.1, "monthly", 15000))
        response = client.get("/items")
        assert response.status_code == 200
        clock = next(i for i in response.get_json()["items"] if i["id"] == "clock-1")
        assert clock["estimation"]["status"] == "normal"

    def test_bad_sort(self, client):
        assert client.get("/items?sort=colour").status_code == 400

    def test_bad_status(self, client):
        assert client.get("/items?status=urgent").status_code == 400


class TestCreateItem:
    """Tests for POST /items."""

    def test_create_json(self, client, store):
        response = client.post("/items", json={
            "name": "Van",
            "currentReading": 50000,
            "consumptionRate": 300,
            "consumptionPeriod": "weekly",
            "maintenanceOption": "15000",
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data["maintenanceThreshold"] == 15000
        assert store.get(data["id"]).name == "Van"

    def test_create_form(self, client, store):
        response = client.post("/items", data={
            "name": "Van",
            "currentReading": "50000",
            "consumptionRate": "300",
            "consumptionPeriod": "monthly",
            "maintenanceOption": "custom",
            "maintenanceThreshold": "7500",
        })
        assert response.status_code == 201
        item = store.get(response.get_json()["id"])
        assert item.current_reading == 50000
        assert item.maintenance_threshold == 7500

    def test_validation_errors(self, client, store):
        response = client.post("/items", json={
            "name": "V",
            "currentReading": -1,
            "consumptionRate": 300,
            "consumptionPeriod": "yearly",
        })
        assert response.status_code == 400
        errors = response.get_json()["errors"]
        assert any(e.startswith("name:") for e in errors)
        assert any(e.startswith("currentReading:") for e in errors)
        assert any(e.startswith("consumptionPeriod:") for e in errors)
        assert len(store.list()) == 3

    def test_create_non_finite(self, client, store):
        response = client.post(
            "/items",
            data='{"name": "Van", "currentReading": NaN, "consumptionRate": 300,'
                 ' "consumptionPeriod": "weekly"}',
            content_type="application/json",
        )
        assert response.status_code == 400
        assert any(e.startswith("currentReading:") for e in response.get_json()["errors"])
        assert len(store.list()) == 3

    def test_custom_without_threshold(self, client):
        response = client.post("/items", json={
            "name": "Van", "currentReading": 1, "consumptionRate": 1,
            "consumptionPeriod": "daily", "maintenanceOption": "custom",
        })
        assert response.status_code == 400

    def test_unknown_option(self, client):
        response = client.post("/items", json={
            "name": "Van", "currentReading": 1, "consumptionRate": 1,
            "consumptionPeriod": "daily", "maintenanceOption": "20000",
        })
        assert response.status_code == 400


class TestItemActions:
    """Tests for per-item endpoints."""

    def test_detail(self, client):
        data = client.get("/items/bike-1").get_json()
        assert data["name"] == "Bike"
        assert data["estimation"]["daysLeft"] == 5
        assert data["estimation"]["status"] == "critical"

    def test_detail_not_found(self, client):
        response = client.get("/items/nope")
        assert response.status_code == 404
        assert "nope" in response.get_json()["errors"][0]

    def test_update_reading(self, client, store):
        response = client.post("/items/bike-1/reading", json={"reading": 2400})
        assert response.status_code == 200
        assert response.get_json()["estimation"]["daysLeft"] == 5
        assert store.get("bike-1").current_reading == 2400

    def test_update_reading_invalid(self, client):
        assert client.post("/items/bike-1/reading", json={"reading": -3}).status_code == 400
        assert client.post("/items/bike-1/reading", json={"reading": "lots"}).status_code == 400
        assert client.post("/items/bike-1/reading", json={}).status_code == 400

    def test_update_reading_non_finite(self, client, store):
        for literal in ("NaN", "Infinity"):
            response = client.post(
                "/items/bike-1/reading",
                data=f'{{"reading": {literal}}}',
                content_type="application/json",
            )
            assert response.status_code == 400
        assert store.get("bike-1").current_reading == 2000

    def test_adjust(self, client, store):
        response = client.post("/items/car-1/adjust", json={"offset": -250})
        assert response.status_code == 200
        assert response.get_json()["estimatedReading"] == 9750
        assert store.get("car-1").adjustment_offset == -250

    def test_adjust_form(self, client, store):
        assert client.post("/items/car-1/adjust", data={"offset": "40"}).status_code == 200
        assert store.get("car-1").adjustment_offset == 40

    def test_adjust_invalid(self, client):
        assert client.post("/items/car-1/adjust", json={"offset": "a bit"}).status_code == 400

    def test_adjust_non_finite(self, client, store):
        response = client.post(
            "/items/car-1/adjust", data='{"offset": -Infinity}', content_type="application/json"
        )
        assert response.status_code == 400
        assert store.get("car-1").adjustment_offset == 0

    def test_pin(self, client, store):
        assert client.post("/items/boat-1/pin").get_json()["isPinned"] is True
        assert client.get("/items").get_json()["items"][0]["id"] == "boat-1"
        assert client.get("/").get_json()["pinned"] == ["boat-1"]

    def test_delete(self, client, store):
        assert client.delete("/items/boat-1").status_code == 204
        assert store.get("boat-1") is None
        assert client.delete("/items/boat-1").status_code == 404


class TestEditItem:
    """Tests for PATCH /items/<id>."""

    def test_edit_rate_and_name(self, client, store):
        response = client.patch("/items/bike-1", json={"name": "Road bike", "consumptionRate": 50})
        assert response.status_code == 200
        data = response.get_json()
        assert data["name"] == "Road bike"
        assert data["estimation"]["daysLeft"] == 10
        assert store.get("bike-1").consumption_rate == 50

    def test_threshold_matching_preset_sets_option(self, client, store):
        response = client.patch("/items/car-1", json={"maintenanceThreshold": 15000})
        assert response.get_json()["maintenanceOption"] == "15000"
        assert store.get("car-1").maintenance_threshold == 15000

    def test_preset_option_sets_threshold(self, client, store):
        response = client.patch("/items/boat-1", data={"maintenanceOption": "10000"})
        assert response.status_code == 200
        assert store.get("boat-1").maintenance_threshold == 10000

    def test_keeps_created_at_and_pin(self, client, store):
        client.post("/items/boat-1/pin")
        before = store.get("boat-1")
        client.patch("/items/boat-1", json={"consumptionPeriod": "weekly"})
        after = store.get("boat-1")
        assert after.created_at == before.created_at
        assert after.updated_at == before.updated_at
        assert after.is_pinned is True
        assert after.consumption_period == "weekly"

    def test_invalid_edit(self, client, store):
        response = client.patch("/items/car-1", json={"name": "X", "consumptionRate": -1})
        assert response.status_code == 400
        errors = response.get_json()["errors"]
        assert any(e.startswith("name:") for e in errors)
        assert any(e.startswith("consumptionRate:") for e in errors)
        assert store.get("car-1").name == "Family car"

    def test_non_editable_field(self, client):
        response = client.patch("/items/car-1", json={"currentReading": 1})
        assert response.status_code == 400
        assert "currentReading" in response.get_json()["errors"][0]

    def test_unknown_option(self, client):
        response = client.patch("/items/car-1", json={"maintenanceOption": "20000"})
        assert response.status_code == 400

    def test_not_found(self, client):
        assert client.patch("/items/nope", json={"name": "Nope"}).status_code == 404


class TestYamlBackedApp:
    """The app reads ITEMS_FILE when no store is injected."""

    def test_uses_items_file(self, tmp_path):
        path = tmp_path / "items.yaml"
        YamlItemStore(path).put(make_item("car-1", "Family car", 700, "weekly", 5000))
        app.config["TESTING"] = True
        app.config["ITEM_STORE"] = None
        app.config["ITEMS_FILE"] = path
        with app.test_client() as client:
            assert client.get("/items/car-1").status_code == 200
            assert client.delete("/items/car-1").status_code == 204
        assert YamlItemStore(path).list() == []

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "items.yaml"
        path.write_text("items: nope\n")
        app.config["TESTING"] = True
        app.config["ITEM_STORE"] = None
        app.config["ITEMS_FILE"] = path
        with app.test_client() as client:
            response = client.get("/items")
        assert response.status_code == 500
        assert response.get_json()["errors"]
