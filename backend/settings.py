from __future__ import annotations

"""Utility functions for loading and saving user settings.

The settings are stored as a list of dictionaries to preserve order.
Each dictionary contains ``key``, ``value`` and ``type`` entries.
"""

from pathlib import Path
import json
import logging
from typing import Any, List, Dict

from backend import DATA_DIR, DEFAULT_MAP_ZOOM

# Path to the JSON file where settings are persisted.
SETTINGS_PATH = DATA_DIR / "settings.json"

# Default settings to initialize the file on first run.  ``start_lat`` and
# ``start_lng`` are where the map opens.
DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "map_zoom_level", "value": DEFAULT_MAP_ZOOM, "type": "int"},
    {"key": "start_lat", "value": 41.0, "type": "float"},
    {"key": "start_lng", "value": -8.0, "type": "float"},
]

# Internal cache so settings are only read from disk once.
_settings_cache: List[Dict[str, Any]] | None = None


def load_settings(path: Path | None = None) -> List[Dict[str, Any]]:
    """Load settings from ``path`` or create defaults."""
    path = Path(path or SETTINGS_PATH)
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            if isinstance(data, list):
                return data
            logging.warning("Settings file %s is not a list; using defaults", path)
        except (OSError, ValueError):
            logging.exception("Reading settings from %s failed", path)
    defaults = [dict(item) for item in DEFAULT_SETTINGS]
    try:
        save_settings(defaults, path)
    except OSError:
        logging.exception("Writing default settings to %s failed", path)
    return defaults


def save_settings(settings: List[Dict[str, Any]], path: Path | None = None) -> None:
    """Persist ``settings`` to ``path``."""
    path = Path(path or SETTINGS_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(settings, fh)


def get_settings() -> List[Dict[str, Any]]:
    """Return the cached settings list, loading from disk if needed."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def clear_cache() -> None:
    """Forget cached settings so the next read goes to disk."""
    global _settings_cache
    _settings_cache = None


def get_value(key: str) -> Any:
    """Fetch the value associated with ``key``."""
    for item in get_settings():
        if item.get("key") == key:
            return item.get("value")
    for item in DEFAULT_SETTINGS:
        if item["key"] == key:
            return item["value"]
    return None


def set_value(key: str, value: Any) -> None:
    """Update ``key`` with ``value`` and persist the change."""
    settings = get_settings()
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings)
