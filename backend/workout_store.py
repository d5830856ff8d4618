"""In-memory ordered collection of workouts.

Every mutating method writes the whole collection back through the
:class:`~backend.storage.WorkoutPersistence` before returning, so the
stored list always mirrors what the user sees.
"""

from __future__ import annotations

from backend.storage import WorkoutPersistence
from backend.workouts import EXTRA_FIELD, Workout, recalculate


class NotFoundError(LookupError):
    """Raised when no workout carries the requested id."""


class WorkoutStore:
    def __init__(self, persistence: WorkoutPersistence) -> None:
        self.persistence = persistence
        self._workouts: list[Workout] = []

    def __len__(self) -> int:
        return len(self._workouts)

    def _persist(self) -> None:
        self.persistence.save(self._workouts)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def all(self) -> list[Workout]:
        """Return the workouts in display order."""
        return list(self._workouts)

    def index_of(self, workout_id: str) -> int:
        for index, workout in enumerate(self._workouts):
            if workout.id == workout_id:
                return index
        raise NotFoundError(f"Workout '{workout_id}' not found")

    def get(self, workout_id: str) -> Workout:
        return self._workouts[self.index_of(workout_id)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create(self, workout: Workout) -> int:
        """Append ``workout`` and return its index."""

        self._workouts.append(workout)
        self._persist()
        return len(self._workouts) - 1

    def replace(self, index: int, workout: Workout) -> Workout:
        """Put ``workout`` at ``index`` and return the record it replaced."""

        old = self._workouts[index]
        self._workouts[index] = workout
        self._persist()
        return old

    def update_in_place(self, index: int, fields: dict) -> Workout:
        """Change the numeric inputs of the workout at ``index``.

        Only ``distance``, ``duration`` and the workout's own activity field
        may be given.  ``id``, ``date`` and ``description`` are kept and the
        derived metric is recomputed.
        """

        workout = self._workouts[index]
        allowed = {"distance", "duration", EXTRA_FIELD[workout.type]}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(
                f"Cannot update {sorted(unknown)} on a {workout.type.value} workout"
            )
        for name, value in fields.items():
            setattr(workout, name, value)
        recalculate(workout)
        self._persist()
        return workout

    def remove_by_id(self, workout_id: str) -> int:
        """Remove the workout with ``workout_id`` and return its old index."""

        index = self.index_of(workout_id)
        del self._workouts[index]
        self._persist()
        return index

    def restore(self) -> list[Workout]:
        """Replace the in-memory list with the persisted one."""

        self._workouts = self.persistence.load()
        return self.all()

    def reset(self) -> None:
        """Forget every workout, both stored and in memory."""

        self.persistence.clear()
        self._workouts = []
