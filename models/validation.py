"""JSON Schema validation for item records."""

import copy
import math
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml
from jsonschema import Draft7Validator

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"

# JSON Schema has no notion of NaN or infinity, so these are checked separately
NUMERIC_FIELDS = ("currentReading", "consumptionRate", "maintenanceThreshold", "adjustmentOffset")


@lru_cache
def load_schema() -> Dict[str, Any]:
    """Load the JSON schema from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def _path_key(error) -> List[str]:
    return [str(p) for p in error.path]


def _describe(error) -> str:
    if error.path:
        return f"{'.'.join(str(p) for p in error.path)}: {error.message}"
    return error.message


def _non_finite(data: Any, prefix: str = "") -> List[str]:
    if not isinstance(data, dict):
        return []
    errors = []
    for field in NUMERIC_FIELDS:
        value = data.get(field)
        if isinstance(value, float) and not math.isfinite(value):
            errors.append(f"{prefix}{field}: {value!r} is not a finite number")
    return errors


def validate_document(data: Any) -> List[str]:
    """Validate a whole items document. Returns list of errors."""
    validator = Draft7Validator(load_schema())
    errors = [_describe(e) for e in sorted(validator.iter_errors(data), key=_path_key)]
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        for index, entry in enumerate(data["items"]):
            errors.extend(_non_finite(entry, f"items.{index}."))
    return errors


def validate_item(data: Any, require_id: bool = True) -> List[str]:
    """
    Validate a single camelCase item mapping. Returns list of errors.

    With require_id=False the id may be absent, for payloads describing an
    item that hasn't been stored yet.
    """
    item_schema = copy.deepcopy(load_schema()["$defs"]["item"])
    if not require_id:
        item_schema["required"] = [f for f in item_schema["required"] if f != "id"]
    validator = Draft7Validator(item_schema)
    errors = [_describe(e) for e in sorted(validator.iter_errors(data), key=_path_key)]
    return errors + _non_finite(data)
