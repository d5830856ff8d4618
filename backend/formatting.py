"""Text shown for a workout on the map and in the list."""

from __future__ import annotations

from backend.workouts import Workout, WorkoutType

ICONS = {
    WorkoutType.RUNNING: "🏃‍♂️",
    WorkoutType.CYCLING: "🚴‍♀️",
}

METRIC_UNITS = {
    WorkoutType.RUNNING: "min/km",
    WorkoutType.CYCLING: "km/h",
}

EXTRA_DETAILS = {
    WorkoutType.RUNNING: ("🦶🏼", "spm"),
    WorkoutType.CYCLING: ("⛰", "m"),
}


def format_number(value) -> str:
    """Return ``value`` without a trailing ``.0`` for whole numbers."""

    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def popup_text(workout: Workout) -> str:
    """Text shown in the marker popup, e.g. ``"🏃‍♂️ Running on April 14"``."""
    return f"{ICONS[workout.type]} {workout.description}"


def row_details(workout: Workout) -> list[tuple[str, str, str]]:
    """Return ``(icon, value, unit)`` triples for a list row.

    The derived metric is rounded to one decimal place; the inputs are shown
    as entered.
    """

    extra_icon, extra_unit = EXTRA_DETAILS[workout.type]
    return [
        (ICONS[workout.type], format_number(workout.distance), "km"),
        ("⏱", format_number(workout.duration), "min"),
        ("⚡️", f"{workout.metric:.1f}", METRIC_UNITS[workout.type]),
        (extra_icon, format_number(workout.extra), extra_unit),
    ]


def row_summary(workout: Workout) -> str:
    """Single line combining every row detail."""
    return "  ".join(f"{icon} {value} {unit}" for icon, value, unit in row_details(workout))
