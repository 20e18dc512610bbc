#!/usr/bin/env python3
"""Validate item YAML files against the schema."""
import sys
from pathlib import Path
from typing import List

import yaml

from models.validation import validate_document
from settings import get_settings


def validate_items_file(filepath: Path) -> List[str]:
    """Validate a single items YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        for message in validate_document(data):
            errors.append(f"Schema validation error: {message}")
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate the given items files, or the configured one."""
    paths = [Path(p) for p in (sys.argv[1:] if argv is None else argv)]
    if not paths:
        paths = [get_settings().items_file]

    all_valid = True
    for filepath in paths:
        errors = validate_items_file(filepath)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
