"""Environment-driven application settings."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from models.listing import DEFAULT_SORT, SORT_METHODS

_ITEMS_FILE_ENV = "MAINT_ITEMS_FILE"
_ITEMS_SORT_ENV = "MAINT_ITEMS_SORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_SECRET_KEY_ENV = "SECRET_KEY"


@dataclass(frozen=True)
class Settings:
    items_file: Path
    items_sort: str
    log_level: str
    secret_key: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_sort(default: str) -> str:
    candidate = _read_str_env(_ITEMS_SORT_ENV, default).lower()
    return candidate if candidate in SORT_METHODS else default


@lru_cache
def get_settings() -> Settings:
    return Settings(
        items_file=Path(_read_str_env(_ITEMS_FILE_ENV, "items.yaml")),
        items_sort=_read_sort(DEFAULT_SORT),
        log_level=_read_str_env(_LOG_LEVEL_ENV, "INFO").upper(),
        secret_key=_read_str_env(_SECRET_KEY_ENV, "dev-secret-key-change-in-prod"),
    )
