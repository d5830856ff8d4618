"""Durable key/value storage and workout persistence.

:class:`KeyValueStorage` keeps a single JSON object on disk and offers the
``get_item``/``set_item``/``remove_item`` trio of a browser's
``localStorage``.  :class:`WorkoutPersistence` stores the whole ordered
workout list under one key of such a storage and restores it on startup.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable

from backend import DEFAULT_STORAGE_PATH, WORKOUTS_KEY
from backend.workouts import Workout


class PersistenceUnavailable(OSError):
    """Raised when the storage file cannot be read or written."""


class KeyValueStorage:
    """JSON file holding a flat mapping of keys to JSON values."""

    def __init__(self, path: Path = DEFAULT_STORAGE_PATH) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logging.warning("Ignoring storage file %s: not UTF-8 text", self.path)
            return {}
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot read {self.path}") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except ValueError:
            logging.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        if not isinstance(data, dict):
            logging.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        # The previous file stays intact until the new one is complete.
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot write {self.path}") from exc

    def get_item(self, key: str) -> Any:
        """Return the value stored under ``key`` or ``None``."""
        return self._read().get(key)

    def set_item(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        """Delete ``key`` if present."""
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class WorkoutPersistence:
    """Serialise the workout collection to a :class:`KeyValueStorage`.

    Storage failures never propagate: a failed load yields an empty list and
    a failed save is logged, leaving the in-memory collection authoritative
    until the next successful save.
    """

    def __init__(self, storage: KeyValueStorage, key: str = WORKOUTS_KEY) -> None:
        self.storage = storage
        self.key = key

    def save(self, workouts: Iterable[Workout]) -> bool:
        """Overwrite the stored list with ``workouts``.

        Returns ``False`` if the storage was unavailable.
        """

        payload = [w.to_dict() for w in workouts]
        try:
            self.storage.set_item(self.key, payload)
        except PersistenceUnavailable:
            logging.exception("Saving workouts failed")
            return False
        return True

    def load(self) -> list[Workout]:
        """Return the stored workouts in display order."""

        try:
            data = self.storage.get_item(self.key)
        except PersistenceUnavailable:
            logging.exception("Loading workouts failed")
            return []
        if not data:
            return []
        if not isinstance(data, list):
            logging.warning("Stored %r value is not a list; starting empty", self.key)
            return []
        try:
            return [Workout.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError):
            logging.exception("Stored workouts are unreadable; starting empty")
            return []

    def clear(self) -> None:
        """Remove the stored list entirely."""

        try:
            self.storage.remove_item(self.key)
        except PersistenceUnavailable:
            logging.exception("Clearing stored workouts failed")
