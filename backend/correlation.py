"""Keep map markers and list rows aligned with the workout store.

The layer keeps one ordered list of :class:`VisualEntry` objects, each
bundling the id of a workout with its marker and its row, so the marker
sequence and the row sequence can never drift apart from each other.  Every
operation is given the position the :class:`~backend.workout_store.WorkoutStore`
used for the matching mutation; positions are never looked up again here.

The surfaces are duck-typed.  A map surface provides::

    add_marker(workout) -> marker
    update_marker(marker, workout)
    remove_marker(marker)
    set_view(coords, zoom)

and a list surface provides::

    add_row(workout, position) -> row
    update_row(row, workout)
    remove_row(row)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from backend import DEFAULT_MAP_ZOOM
from backend.workout_store import NotFoundError
from backend.workouts import Workout


@dataclass
class VisualEntry:
    workout_id: str
    marker: Any
    row: Any


class CorrelationLayer:
    def __init__(self, map_surface, list_surface, zoom: int = DEFAULT_MAP_ZOOM) -> None:
        self.map_surface = map_surface
        self.list_surface = list_surface
        self.zoom = zoom
        self._entries: list[VisualEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def markers(self) -> list:
        return [entry.marker for entry in self._entries]

    @property
    def rows(self) -> list:
        return [entry.row for entry in self._entries]

    def ids(self) -> list[str]:
        return [entry.workout_id for entry in self._entries]

    def is_aligned(self, workouts: Iterable[Workout]) -> bool:
        """Return ``True`` if the entries match ``workouts`` id for id."""
        return self.ids() == [w.id for w in workouts]

    # ------------------------------------------------------------------
    def _build(self, workout: Workout, position: int) -> VisualEntry:
        marker = self.map_surface.add_marker(workout)
        row = self.list_surface.add_row(workout, position)
        return VisualEntry(workout.id, marker, row)

    def _tear_down(self, entry: VisualEntry) -> None:
        self.map_surface.remove_marker(entry.marker)
        self.list_surface.remove_row(entry.row)

    def _entry_at(self, index: int, workout_id: str) -> VisualEntry:
        if not 0 <= index < len(self._entries):
            logging.error("No visual entry at %d for workout %s", index, workout_id)
            raise NotFoundError(f"No visual entry at position {index}")
        entry = self._entries[index]
        if entry.workout_id != workout_id:
            logging.error(
                "Visual entry %d belongs to %s, expected %s",
                index,
                entry.workout_id,
                workout_id,
            )
            raise NotFoundError(f"Workout '{workout_id}' is not at position {index}")
        return entry

    # ------------------------------------------------------------------
    def append(self, workout: Workout) -> VisualEntry:
        """Add a marker and a row for a newly created workout."""

        entry = self._build(workout, len(self._entries))
        self._entries.append(entry)
        return entry

    def refresh(self, index: int, workout: Workout) -> VisualEntry:
        """Re-render the row and popup at ``index`` after an in-place edit."""

        entry = self._entry_at(index, workout.id)
        self.list_surface.update_row(entry.row, workout)
        self.map_surface.update_marker(entry.marker, workout)
        return entry

    def swap(self, index: int, old_id: str, workout: Workout) -> VisualEntry:
        """Replace the visuals at ``index`` with new ones for ``workout``."""

        old = self._entry_at(index, old_id)
        self._tear_down(old)
        entry = self._build(workout, index)
        self._entries[index] = entry
        return entry

    def remove_at(self, index: int, workout_id: str) -> None:
        """Remove the marker and row at ``index``, the store's removal index."""

        entry = self._entry_at(index, workout_id)
        self._tear_down(entry)
        del self._entries[index]

    def clear(self) -> None:
        for entry in self._entries:
            self._tear_down(entry)
        self._entries = []

    def rebuild(self, workouts: Iterable[Workout]) -> None:
        """Tear down all visuals and re-add one per workout, in order."""

        self.clear()
        for workout in workouts:
            self.append(workout)

    def focus(self, workout: Workout) -> None:
        """Center the map on ``workout``."""
        self.map_surface.set_view(workout.coords, self.zoom)
