"""Wire the store, correlation layer and controller together."""

from __future__ import annotations

from pathlib import Path

from backend import DEFAULT_MAP_ZOOM, DEFAULT_STORAGE_PATH, WORKOUTS_KEY
from backend.correlation import CorrelationLayer
from backend.crud import CrudController
from backend.storage import KeyValueStorage, WorkoutPersistence
from backend.workout_store import WorkoutStore


def build_controller(
    map_surface,
    list_surface,
    storage_path: Path = DEFAULT_STORAGE_PATH,
    zoom: int = DEFAULT_MAP_ZOOM,
) -> CrudController:
    """Return a controller over the workouts stored at ``storage_path``.

    Stored workouts are loaded into memory here but nothing is drawn until
    :meth:`CrudController.map_ready` is called.
    """

    persistence = WorkoutPersistence(KeyValueStorage(storage_path), WORKOUTS_KEY)
    store = WorkoutStore(persistence)
    store.restore()
    correlation = CorrelationLayer(map_surface, list_surface, zoom=zoom)
    return CrudController(store, correlation)
