from pathlib import Path
import sys
import types

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.correlation import CorrelationLayer
from backend.crud import CrudController
from backend.storage import KeyValueStorage, WorkoutPersistence
from backend.workout_store import WorkoutStore


class FakeMapSurface:
    """Records marker calls instead of drawing them."""

    def __init__(self):
        self.markers = []
        self.views = []
        self.updates = []

    def add_marker(self, workout):
        marker = types.SimpleNamespace(workout_id=workout.id, coords=workout.coords)
        self.markers.append(marker)
        return marker

    def update_marker(self, marker, workout):
        self.updates.append(workout.id)

    def remove_marker(self, marker):
        self.markers = [m for m in self.markers if m is not marker]

    def set_view(self, coords, zoom):
        self.views.append((tuple(coords), zoom))


class FakeListSurface:
    """Keeps rows in display order like an ``MDList`` would."""

    def __init__(self):
        self.rows = []
        self.updates = []

    def add_row(self, workout, position):
        row = types.SimpleNamespace(workout_id=workout.id, description=workout.description)
        self.rows.insert(position, row)
        return row

    def update_row(self, row, workout):
        row.description = workout.description
        self.updates.append(workout.id)

    def remove_row(self, row):
        self.rows = [r for r in self.rows if r is not row]


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "local_storage.json"


@pytest.fixture
def persistence(storage_path: Path) -> WorkoutPersistence:
    return WorkoutPersistence(KeyValueStorage(storage_path))


@pytest.fixture
def store(persistence: WorkoutPersistence) -> WorkoutStore:
    return WorkoutStore(persistence)


@pytest.fixture
def map_surface() -> FakeMapSurface:
    return FakeMapSurface()


@pytest.fixture
def list_surface() -> FakeListSurface:
    return FakeListSurface()


@pytest.fixture
def correlation(map_surface, list_surface) -> CorrelationLayer:
    return CorrelationLayer(map_surface, list_surface)


@pytest.fixture
def controller(store, correlation) -> CrudController:
    ctrl = CrudController(store, correlation)
    ctrl.map_ready((41.0, -8.0))
    return ctrl


@pytest.fixture
def make_surfaces():
    """Return a factory for fresh (map, list) fake surface pairs."""
    return lambda: (FakeMapSurface(), FakeListSurface())
