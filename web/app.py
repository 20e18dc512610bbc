"""Flask web application for maintenance tracking."""

import logging
import math
from datetime import datetime

from flask import Flask, abort, jsonify, request

from logging_config import configure_logging
from models import (
    Item,
    InvalidItemError,
    ItemStore,
    Status,
    YamlItemStore,
    apply_adjustment,
    calculate_estimation,
    edit_item,
    item_to_dict,
    new_item,
    progress_percent,
    project_current_reading,
    record_reading,
    sort_items,
    toggle_pin,
    validate_item,
)
from models.listing import SORT_METHODS
from models.timestamps import utcnow
from settings import get_settings

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = get_settings().secret_key
app.config["ITEMS_FILE"] = get_settings().items_file
app.config["ITEMS_SORT"] = get_settings().items_sort
# Set to an ItemStore instance to bypass ITEMS_FILE
app.config["ITEM_STORE"] = None


def get_store() -> ItemStore:
    """The configured item store."""
    store = app.config.get("ITEM_STORE")
    if store is not None:
        return store
    return YamlItemStore(app.config["ITEMS_FILE"])


def _coerce_number(value):
    """Turn numeric strings (form posts) into numbers; leave anything else as-is."""
    if isinstance(value, str):
        try:
            number = float(value) if value.strip() else None
        except ValueError:
            return value
        if number is not None and not math.isfinite(number):
            return value
        return number
    return value


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def item_view(item: Item, now: datetime) -> dict:
    """JSON view of an item with its projection computed at `now`."""
    estimation = calculate_estimation(item, now)
    data = item_to_dict(item)
    data["estimatedReading"] = project_current_reading(item, now)
    data["progress"] = progress_percent(item, now)
    data["estimation"] = estimation.to_dict()
    return data


def status_counts(items, now: datetime) -> dict:
    statuses = [calculate_estimation(item, now).status for item in items]
    return {s.value: sum(1 for status in statuses if status == s) for s in Status}


def _payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _get_or_404(item_id: str) -> Item:
    item = get_store().get(item_id)
    if item is None:
        abort(404, description=f"Item '{item_id}' not found")
    return item


@app.errorhandler(404)
def not_found(error):
    return jsonify({"errors": [error.description]}), 404


@app.errorhandler(ValueError)
def bad_store(error):
    logger.error("Item store error: %s", error)
    return jsonify({"errors": [str(error)]}), 500


@app.route("/")
def index():
    """Dashboard: status counts for all items."""
    now = utcnow()
    items = get_store().list()
    pinned = [item.id for item in items if item.is_pinned]
    due = [item.id for item in items if calculate_estimation(item, now).is_due]
    return jsonify(
        {"total": len(items), "counts": status_counts(items, now), "pinned": pinned, "due": due}
    )


@app.route("/items", methods=["GET"])
def list_items():
    """All items with estimations, sorted (pinned first) and optionally filtered."""
    now = utcnow()
    sort = request.args.get("sort", "").lower() or app.config["ITEMS_SORT"]
    if sort not in SORT_METHODS:
        return jsonify({"errors": [f"Unknown sort '{sort}'"]}), 400

    items = sort_items(get_store().list(), sort, now)
    views = [item_view(item, now) for item in items]

    status_filter = request.args.get("status", "").lower() or None
    if status_filter:
        if status_filter not in {s.value for s in Status}:
            return jsonify({"errors": [f"Unknown status '{status_filter}'"]}), 400
        views = [v for v in views if v["estimation"]["status"] == status_filter]

    return jsonify({"items": views, "sort": sort})


@app.route("/items", methods=["POST"])
def create_item():
    """Register a new item."""
    payload = _payload()
    option = str(payload.get("maintenanceOption") or "10000")
    threshold = _coerce_number(payload.get("maintenanceThreshold"))
    if option == "custom" and threshold is None:
        return jsonify({"errors": ["maintenanceThreshold is required for a custom option"]}), 400

    try:
        item = new_item(
            name=payload.get("name"),
            current_reading=_coerce_number(payload.get("currentReading")),
            consumption_rate=_coerce_number(payload.get("consumptionRate")),
            consumption_period=payload.get("consumptionPeriod"),
            maintenance_option=option,
            maintenance_threshold=threshold,
        )
    except ValueError as e:
        return jsonify({"errors": [str(e)]}), 400

    errors = validate_item(item_to_dict(item))
    if errors:
        return jsonify({"errors": errors}), 400

    stored = get_store().put(item)
    logger.info("Created item %s (%s)", stored.id, stored.name)
    return jsonify(item_view(stored, utcnow())), 201


@app.route("/items/<item_id>", methods=["GET"])
def item_detail(item_id: str):
    return jsonify(item_view(_get_or_404(item_id), utcnow()))


EDITABLE_KEYS = {
    "name": "name",
    "consumptionRate": "consumption_rate",
    "consumptionPeriod": "consumption_period",
    "maintenanceThreshold": "maintenance_threshold",
    "maintenanceOption": "maintenance_option",
}


@app.route("/items/<item_id>", methods=["PATCH"])
def update_item(item_id: str):
    """Change an item's name, consumption rate or maintenance interval."""
    item = _get_or_404(item_id)
    payload = _payload()
    unknown = sorted(set(payload) - set(EDITABLE_KEYS))
    if unknown:
        return jsonify({"errors": [f"Cannot edit field(s): {', '.join(unknown)}"]}), 400

    changes = {}
    for key, attr in EDITABLE_KEYS.items():
        if key in payload:
            value = payload[key]
            if key in ("consumptionRate", "maintenanceThreshold"):
                value = _coerce_number(value)
            changes[attr] = value

    try:
        edited = edit_item(item, **changes)
    except InvalidItemError as e:
        return jsonify({"errors": e.errors}), 400
    except ValueError as e:
        return jsonify({"errors": [str(e)]}), 400

    stored = get_store().put(edited)
    logger.info("Edited item %s (%s)", stored.id, ", ".join(sorted(changes)))
    return jsonify(item_view(stored, utcnow()))


@app.route("/items/<item_id>/reading", methods=["POST"])
def update_reading(item_id: str):
    """Record an observed reading as the new projection baseline."""
    item = _get_or_404(item_id)
    reading = _coerce_number(_payload().get("reading"))
    if not _is_finite_number(reading) or reading < 0:
        return jsonify({"errors": ["reading must be a non-negative number"]}), 400

    now = utcnow()
    stored = get_store().put(record_reading(item, reading, now))
    return jsonify(item_view(stored, now))


@app.route("/items/<item_id>/adjust", methods=["POST"])
def adjust_reading(item_id: str):
    """Set a signed correction on the projected reading."""
    item = _get_or_404(item_id)
    offset = _coerce_number(_payload().get("offset"))
    if not _is_finite_number(offset):
        return jsonify({"errors": ["offset must be a number"]}), 400

    stored = get_store().put(apply_adjustment(item, offset))
    return jsonify(item_view(stored, utcnow()))


@app.route("/items/<item_id>/pin", methods=["POST"])
def pin_item(item_id: str):
    stored = get_store().put(toggle_pin(_get_or_404(item_id)))
    return jsonify(item_view(stored, utcnow()))


@app.route("/items/<item_id>", methods=["DELETE"])
def delete_item(item_id: str):
    if not get_store().delete(item_id):
        abort(404, description=f"Item '{item_id}' not found")
    logger.info("Deleted item %s", item_id)
    return "", 204


if __name__ == "__main__":
    configure_logging()
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
