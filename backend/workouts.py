"""Workout records for the two supported activities.

A workout is a single :class:`Workout` dataclass tagged with a
:class:`WorkoutType`.  The fields that only make sense for one activity
(``cadence``/``pace`` for running, ``elevation_gain``/``speed`` for
cycling) stay ``None`` on the other variant.  Everything that differs per
activity is looked up in the tables at the bottom of this module, keyed by
the tag, so adding a variant means adding table entries rather than a
subclass.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

# Ids are the last digits of the creation timestamp in milliseconds.
ID_WIDTH = 10

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

_last_timestamp_ms = 0


class WorkoutType(str, Enum):
    RUNNING = "running"
    CYCLING = "cycling"


def _next_timestamp_ms() -> int:
    """Return the current time in ms, strictly greater than the last call."""

    global _last_timestamp_ms
    now = int(time.time() * 1000)
    if now <= _last_timestamp_ms:
        now = _last_timestamp_ms + 1
    _last_timestamp_ms = now
    return now


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def make_description(workout_type: WorkoutType, date: datetime) -> str:
    """Return a label such as ``"Running on April 14"``."""

    name = workout_type.value
    return f"{name[0].upper()}{name[1:]} on {MONTHS[date.month - 1]} {date.day}"


@dataclass
class Workout:
    """One logged exercise session."""

    type: WorkoutType
    id: str
    date: datetime
    coords: tuple[float, float]
    distance: float
    duration: float
    description: str = ""
    clicks: int = 0
    cadence: float | None = None
    pace: float | None = None
    elevation_gain: float | None = None
    speed: float | None = None

    @property
    def metric(self) -> float | None:
        """The derived performance figure for this workout's activity."""

        return getattr(self, METRIC_FIELD[self.type])

    @property
    def extra(self) -> float | None:
        """The activity-specific input field (cadence or elevation gain)."""

        return getattr(self, EXTRA_FIELD[self.type])

    def click(self) -> None:
        self.clicks += 1

    def to_dict(self) -> dict:
        """Return a JSON-serialisable representation of the workout."""

        return {
            "type": self.type.value,
            "id": self.id,
            "date": self.date.isoformat(),
            "coords": list(self.coords),
            "distance": self.distance,
            "duration": self.duration,
            "description": self.description,
            "clicks": self.clicks,
            "cadence": self.cadence,
            "pace": self.pace,
            "elevation_gain": self.elevation_gain,
            "speed": self.speed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Workout":
        """Rebuild a workout from :meth:`to_dict` output.

        Derived values are restored as stored; call :func:`recalculate`
        after changing any input field.
        """

        workout_type = WorkoutType(data["type"])
        required = (
            "distance",
            "duration",
            EXTRA_FIELD[workout_type],
            METRIC_FIELD[workout_type],
        )
        for name in required:
            if not _is_number(data.get(name)):
                raise ValueError(
                    f"Stored {workout_type.value} workout has no numeric {name}"
                )
        lat, lng = data["coords"]
        if not (_is_number(lat) and _is_number(lng)):
            raise ValueError("Stored workout has non-numeric coordinates")
        return cls(
            type=workout_type,
            id=str(data["id"]),
            date=datetime.fromisoformat(data["date"]),
            coords=(lat, lng),
            distance=data["distance"],
            duration=data["duration"],
            description=data.get("description", ""),
            clicks=data.get("clicks", 0),
            cadence=data.get("cadence"),
            pace=data.get("pace"),
            elevation_gain=data.get("elevation_gain"),
            speed=data.get("speed"),
        )


def _calc_pace(workout: Workout) -> float:
    # min/km
    return workout.duration / workout.distance


def _calc_speed(workout: Workout) -> float:
    # km/h
    return workout.distance / (workout.duration / 60)


# Name of the activity-specific input field per variant
EXTRA_FIELD = {
    WorkoutType.RUNNING: "cadence",
    WorkoutType.CYCLING: "elevation_gain",
}

# Name of the derived metric field per variant
METRIC_FIELD = {
    WorkoutType.RUNNING: "pace",
    WorkoutType.CYCLING: "speed",
}

_CALCULATORS = {
    WorkoutType.RUNNING: _calc_pace,
    WorkoutType.CYCLING: _calc_speed,
}


def recalculate(workout: Workout) -> float:
    """Recompute and store the derived metric of ``workout``."""

    value = _CALCULATORS[workout.type](workout)
    setattr(workout, METRIC_FIELD[workout.type], value)
    return value


def create_workout(
    workout_type: WorkoutType | str,
    coords,
    distance: float,
    duration: float,
    extra: Any,
) -> Workout:
    """Construct a complete workout of ``workout_type``.

    ``extra`` is the cadence for running and the elevation gain for cycling.
    Inputs are trusted; validation happens in :mod:`backend.crud`.
    """

    workout_type = WorkoutType(workout_type)
    timestamp = _next_timestamp_ms()
    date = datetime.fromtimestamp(timestamp / 1000)
    lat, lng = coords
    workout = Workout(
        type=workout_type,
        id=str(timestamp)[-ID_WIDTH:],
        date=date,
        coords=(lat, lng),
        distance=distance,
        duration=duration,
    )
    setattr(workout, EXTRA_FIELD[workout_type], extra)
    recalculate(workout)
    workout.description = make_description(workout_type, date)
    return workout


def create_running(coords, distance: float, duration: float, cadence: float) -> Workout:
    return create_workout(WorkoutType.RUNNING, coords, distance, duration, cadence)


def create_cycling(
    coords, distance: float, duration: float, elevation_gain: float
) -> Workout:
    return create_workout(
        WorkoutType.CYCLING, coords, distance, duration, elevation_gain
    )
