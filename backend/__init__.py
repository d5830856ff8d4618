"""Shared constants and globals for backend modules."""

from __future__ import annotations

from pathlib import Path

# Directory holding the files the application writes at runtime
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

# Key/value file standing in for the browser's ``localStorage``
DEFAULT_STORAGE_PATH = DATA_DIR / "local_storage.json"

# Storage key under which the ordered workout list is kept
WORKOUTS_KEY = "workouts"

# Default zoom level used when centering the map on a workout
DEFAULT_MAP_ZOOM = 13

__all__ = [
    "DATA_DIR",
    "DEFAULT_STORAGE_PATH",
    "WORKOUTS_KEY",
    "DEFAULT_MAP_ZOOM",
]
