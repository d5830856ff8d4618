"""State machine turning form submissions into store mutations.

The controller decides whether a submitted form creates a new workout or
edits the one the user picked, validates the numbers, applies the change to
the :class:`~backend.workout_store.WorkoutStore` and hands the position the
store reported to the :class:`~backend.correlation.CorrelationLayer`.

States::

    IDLE            nothing pending, form hidden
    PENDING_CREATE  map clicked, blank form open
    PENDING_UPDATE  "edit" chosen on ``selected_id``, form pre-filled
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from backend.correlation import CorrelationLayer
from backend.formatting import format_number
from backend.workout_store import WorkoutStore
from backend.workouts import (
    EXTRA_FIELD,
    Workout,
    WorkoutType,
    create_workout,
)

VALIDATION_MESSAGE = "Inputs have to be positive numbers!"


class ValidationError(ValueError):
    """Raised when a submitted form holds unusable numbers."""


class CrudState(Enum):
    IDLE = "idle"
    PENDING_CREATE = "pending_create"
    PENDING_UPDATE = "pending_update"


@dataclass
class WorkoutInput:
    """Raw values from the workout form.

    Values may be numbers or the strings typed by the user.
    """

    type: str = WorkoutType.RUNNING.value
    distance: Any = ""
    duration: Any = ""
    cadence: Any = ""
    elevation_gain: Any = ""

    @classmethod
    def from_workout(cls, workout: Workout) -> "WorkoutInput":
        """Return form values pre-filled from ``workout``."""

        values = {
            "type": workout.type.value,
            "distance": format_number(workout.distance),
            "duration": format_number(workout.duration),
        }
        values[EXTRA_FIELD[workout.type]] = format_number(workout.extra)
        return cls(**values)


def parse_number(value: Any) -> float:
    """Convert a form value to ``float``.

    Blank input counts as ``0`` and unparsable text as ``nan`` so both are
    rejected by :func:`validate_input` where a positive number is required.
    """

    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def validate_input(form: WorkoutInput) -> tuple[WorkoutType, float, float, float]:
    """Return ``(type, distance, duration, extra)`` or raise ValidationError.

    All three numbers must be finite.  Distance, duration and cadence must
    be positive; elevation gain may be zero.
    """

    try:
        workout_type = WorkoutType(form.type)
    except ValueError as exc:
        raise ValidationError(f"Unknown workout type {form.type!r}") from exc

    distance = parse_number(form.distance)
    duration = parse_number(form.duration)
    extra = parse_number(getattr(form, EXTRA_FIELD[workout_type]))

    if not all(math.isfinite(v) for v in (distance, duration, extra)):
        raise ValidationError(VALIDATION_MESSAGE)
    if distance <= 0 or duration <= 0:
        raise ValidationError(VALIDATION_MESSAGE)
    if workout_type is WorkoutType.RUNNING and extra <= 0:
        raise ValidationError(VALIDATION_MESSAGE)
    if workout_type is WorkoutType.CYCLING and extra < 0:
        raise ValidationError(VALIDATION_MESSAGE)

    if workout_type is WorkoutType.RUNNING and extra.is_integer():
        extra = int(extra)
    return workout_type, distance, duration, extra


class CrudController:
    """Drive create/update/delete requests coming from the UI."""

    def __init__(self, store: WorkoutStore, correlation: CorrelationLayer) -> None:
        self.store = store
        self.correlation = correlation
        self.state = CrudState.IDLE
        self.selected_id: str | None = None
        self.pending_coords: tuple[float, float] | None = None
        self.map_is_ready = False

    def _to_idle(self) -> None:
        self.state = CrudState.IDLE
        self.selected_id = None
        self.pending_coords = None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def map_ready(self, coords) -> None:
        """Center the map on ``coords`` and draw the stored workouts once."""

        self.correlation.map_surface.set_view(tuple(coords), self.correlation.zoom)
        if self.map_is_ready:
            return
        self.map_is_ready = True
        self.correlation.rebuild(self.store.all())

    def map_clicked(self, coords) -> None:
        """Open a blank form for a workout at ``coords``.

        Ignored until :meth:`map_ready` has run.
        """

        if not self.map_is_ready:
            logging.info("Map click at %s ignored; map is not ready", coords)
            return
        lat, lng = coords
        self.state = CrudState.PENDING_CREATE
        self.selected_id = None
        self.pending_coords = (lat, lng)

    def select(self, workout_id: str) -> Workout:
        """Center the map on a workout picked from the list."""

        workout = self.store.get(workout_id)
        workout.click()
        self.correlation.focus(workout)
        self._to_idle()
        return workout

    def begin_edit(self, workout_id: str) -> WorkoutInput:
        """Switch to editing ``workout_id`` and return the pre-filled form."""

        workout = self.store.get(workout_id)
        self.state = CrudState.PENDING_UPDATE
        self.selected_id = workout.id
        self.pending_coords = None
        return WorkoutInput.from_workout(workout)

    def cancel(self) -> None:
        self._to_idle()

    def submit(self, form: WorkoutInput) -> Workout | None:
        """Apply ``form`` according to the current state.

        Returns the created or edited workout, or ``None`` when nothing is
        pending.  Raises :class:`ValidationError` without touching the store
        if the numbers are unusable; the state is kept so the user can fix
        the form.
        """

        if self.state is CrudState.IDLE:
            logging.warning("Workout form submitted with no pending operation")
            return None

        workout_type, distance, duration, extra = validate_input(form)

        if self.state is CrudState.PENDING_CREATE:
            workout = create_workout(
                workout_type, self.pending_coords, distance, duration, extra
            )
            self.store.create(workout)
            self.correlation.append(workout)
        else:
            workout = self._apply_edit(workout_type, distance, duration, extra)

        self._to_idle()
        return workout

    def _apply_edit(
        self, workout_type: WorkoutType, distance: float, duration: float, extra
    ) -> Workout:
        index = self.store.index_of(self.selected_id)
        current = self.store.all()[index]
        if current.type is workout_type:
            fields = {
                "distance": distance,
                "duration": duration,
                EXTRA_FIELD[workout_type]: extra,
            }
            workout = self.store.update_in_place(index, fields)
            self.correlation.refresh(index, workout)
            return workout

        workout = create_workout(workout_type, current.coords, distance, duration, extra)
        self.store.replace(index, workout)
        self.correlation.swap(index, current.id, workout)
        return workout

    def delete(self, workout_id: str, confirmed: bool) -> bool:
        """Delete ``workout_id`` if the user ``confirmed`` it.

        Returns ``True`` when the workout was removed.
        """

        if not confirmed:
            logging.info("Delete of workout %s cancelled", workout_id)
            return False
        index = self.store.remove_by_id(workout_id)
        self.correlation.remove_at(index, workout_id)
        self._to_idle()
        return True

    def reset(self) -> None:
        """Drop every workout, stored and displayed."""

        self.store.reset()
        self.correlation.clear()
        self._to_idle()
