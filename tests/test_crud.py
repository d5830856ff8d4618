import json
import math
import random

import pytest

from backend.bootstrap import build_controller
from backend.crud import (
    CrudController,
    CrudState,
    ValidationError,
    WorkoutInput,
    parse_number,
    validate_input,
)
from backend.workout_store import NotFoundError
from backend.workouts import WorkoutType, create_running


def assert_aligned(controller, map_surface, list_surface):
    store_ids = [w.id for w in controller.store.all()]
    assert controller.correlation.ids() == store_ids
    assert [m.workout_id for m in controller.correlation.markers] == store_ids
    assert [r.workout_id for r in list_surface.rows] == store_ids
    assert sorted(m.workout_id for m in map_surface.markers) == sorted(store_ids)


def create(controller, coords=(41.0, -8.0), **fields):
    controller.map_clicked(coords)
    return controller.submit(WorkoutInput(**fields))


def running(distance="5.2", duration="24", cadence="178"):
    return {"type": "running", "distance": distance, "duration": duration, "cadence": cadence}


def cycling(distance="27", duration="95", elevation_gain="456"):
    return {
        "type": "cycling",
        "distance": distance,
        "duration": duration,
        "elevation_gain": elevation_gain,
    }


# ----------------------------------------------------------------------
# Parsing and validation
# ----------------------------------------------------------------------
def test_parse_number():
    assert parse_number("") == 0
    assert parse_number("  ") == 0
    assert parse_number(None) == 0
    assert parse_number("4.5") == 4.5
    assert parse_number(3) == 3.0
    assert math.isnan(parse_number("abc"))


@pytest.mark.parametrize(
    "fields",
    [
        running(distance="-3"),
        running(duration="0"),
        running(cadence=""),
        running(cadence="abc"),
        running(distance="inf"),
        cycling(distance=""),
        cycling(elevation_gain="-1"),
        cycling(elevation_gain="nan"),
        {"type": "swimming", "distance": "1", "duration": "1"},
    ],
)
def test_invalid_input_rejected(fields):
    with pytest.raises(ValidationError):
        validate_input(WorkoutInput(**fields))


def test_valid_input():
    assert validate_input(WorkoutInput(**running())) == (WorkoutType.RUNNING, 5.2, 24.0, 178)
    assert validate_input(WorkoutInput(**cycling(elevation_gain=""))) == (
        WorkoutType.CYCLING,
        27.0,
        95.0,
        0.0,
    )


# ----------------------------------------------------------------------
# State machine
# ----------------------------------------------------------------------
def test_create_flow(controller, map_surface, list_surface):
    assert controller.state is CrudState.IDLE
    controller.map_clicked((41.0, -8.0))
    assert controller.state is CrudState.PENDING_CREATE

    workout = controller.submit(WorkoutInput(**running()))
    assert workout.pace == pytest.approx(4.615, abs=1e-3)
    assert workout.coords == (41.0, -8.0)
    assert controller.state is CrudState.IDLE
    assert len(controller.store) == 1
    assert_aligned(controller, map_surface, list_surface)


def test_cycling_created(controller):
    workout = create(controller, **cycling())
    assert workout.speed == pytest.approx(17.05, abs=1e-2)


def test_submit_when_idle_does_nothing(controller):
    assert controller.submit(WorkoutInput(**running())) is None
    assert len(controller.store) == 0


def test_rejected_submission_keeps_state(controller, map_surface, list_surface):
    controller.map_clicked((0, 0))
    with pytest.raises(ValidationError):
        controller.submit(WorkoutInput(**running(distance="-3")))
    assert controller.state is CrudState.PENDING_CREATE
    assert len(controller.store) == 0
    assert_aligned(controller, map_surface, list_surface)


def test_delete_first_of_two(controller, map_surface, list_surface):
    first = create(controller, **running())
    second = create(controller, (42.0, -9.0), **cycling())

    assert controller.delete(first.id, confirmed=True)
    remaining = controller.store.all()
    assert [w.id for w in remaining] == [second.id]
    assert remaining[0].distance == 27
    assert list_surface.rows[0].workout_id == second.id
    assert controller.correlation.markers[0].workout_id == second.id
    assert_aligned(controller, map_surface, list_surface)


def test_declined_delete_changes_nothing(controller, persistence):
    workout = create(controller, **running())
    controller.begin_edit(workout.id)
    assert not controller.delete(workout.id, confirmed=False)
    assert len(controller.store) == 1
    assert controller.state is CrudState.PENDING_UPDATE
    assert len(persistence.load()) == 1


def test_delete_cancels_edit(controller):
    workout = create(controller, **running())
    controller.begin_edit(workout.id)
    controller.delete(workout.id, confirmed=True)
    assert controller.state is CrudState.IDLE
    assert controller.selected_id is None


def test_edit_same_type(controller, map_surface, list_surface):
    workout = create(controller, **running())
    original_id, original_date = workout.id, workout.date

    form = controller.begin_edit(workout.id)
    assert controller.state is CrudState.PENDING_UPDATE
    assert controller.selected_id == workout.id
    assert form == WorkoutInput(type="running", distance="5.2", duration="24", cadence="178")

    form.distance = "8"
    edited = controller.submit(form)
    assert edited.id == original_id
    assert edited.date == original_date
    assert edited.pace == 3.0
    assert len(controller.correlation) == 1
    assert list_surface.updates == [original_id]
    assert controller.state is CrudState.IDLE
    assert_aligned(controller, map_surface, list_surface)


def test_edit_changes_type(controller, map_surface, list_surface, persistence):
    first = create(controller, **running())
    second = create(controller, (42.0, -9.0), **running(distance="10"))

    controller.begin_edit(first.id)
    edited = controller.submit(WorkoutInput(**cycling()))
    assert edited.id != first.id
    assert edited.type is WorkoutType.CYCLING
    assert edited.coords == first.coords
    assert edited.description.startswith("Cycling on")

    ids = [w.id for w in controller.store.all()]
    assert ids == [edited.id, second.id]
    assert first.id not in controller.correlation.ids()
    assert first.id not in [r.workout_id for r in list_surface.rows]
    assert first.id not in [m.workout_id for m in map_surface.markers]
    assert [w.id for w in persistence.load()] == ids
    assert_aligned(controller, map_surface, list_surface)


def test_invalid_edit_leaves_workout(controller):
    workout = create(controller, **running())
    controller.begin_edit(workout.id)
    with pytest.raises(ValidationError):
        controller.submit(WorkoutInput(**running(duration="abc")))
    assert controller.store.get(workout.id).duration == 24
    assert controller.state is CrudState.PENDING_UPDATE


def test_map_click_clears_selection(controller):
    workout = create(controller, **running())
    controller.begin_edit(workout.id)
    controller.map_clicked((1.0, 2.0))
    assert controller.state is CrudState.PENDING_CREATE
    assert controller.selected_id is None
    assert controller.pending_coords == (1.0, 2.0)


def test_select_centers_and_counts(controller, map_surface):
    workout = create(controller, (40.0, -7.0), **running())
    controller.map_clicked((0, 0))
    controller.select(workout.id)
    assert workout.clicks == 1
    assert map_surface.views[-1] == ((40.0, -7.0), 13)
    assert controller.state is CrudState.IDLE


def test_unknown_id_raises(controller):
    with pytest.raises(NotFoundError):
        controller.begin_edit("0000000000")
    with pytest.raises(NotFoundError):
        controller.delete("0000000000", confirmed=True)


def test_reset(controller, map_surface, list_surface, persistence):
    create(controller, **running())
    create(controller, **cycling())
    controller.reset()
    assert len(controller.store) == 0
    assert persistence.load() == []
    assert_aligned(controller, map_surface, list_surface)


def test_reload_draws_stored_workouts(storage_path, map_surface, list_surface, make_surfaces):
    first = build_controller(map_surface, list_surface, storage_path)
    first.map_ready((41.0, -8.0))
    a = create(first, **running())
    b = create(first, **cycling())

    new_map, new_list = make_surfaces()
    second = build_controller(new_map, new_list, storage_path)
    assert len(new_list.rows) == 0
    second.map_ready((41.0, -8.0))
    second.map_ready((41.0, -8.0))
    assert [w.id for w in second.store.all()] == [a.id, b.id]
    assert second.store.all() == [a, b]
    assert_aligned(second, new_map, new_list)


def test_random_operations_stay_aligned(controller, map_surface, list_surface):
    rng = random.Random(1234)
    for _ in range(200):
        ids = [w.id for w in controller.store.all()]
        action = rng.choice(["create", "create", "edit", "delete", "bad"])
        if action == "create" or not ids:
            fields = rng.choice([running(), cycling()])
            create(controller, (rng.random(), rng.random()), **fields)
        elif action == "edit":
            controller.begin_edit(rng.choice(ids))
            fields = rng.choice([running(distance=str(rng.randint(1, 30))), cycling()])
            controller.submit(WorkoutInput(**fields))
        elif action == "delete":
            controller.delete(rng.choice(ids), confirmed=rng.random() > 0.3)
        else:
            controller.map_clicked((0, 0))
            with pytest.raises(ValidationError):
                controller.submit(WorkoutInput(**running(distance="-1")))
        assert_aligned(controller, map_surface, list_surface)


def test_cancel_returns_to_idle(controller):
    workout = create(controller, **running())
    controller.begin_edit(workout.id)
    controller.cancel()
    assert controller.state is CrudState.IDLE
    assert controller.submit(WorkoutInput(**cycling())) is None
    assert controller.store.get(workout.id).type is WorkoutType.RUNNING


def test_map_click_before_ready_is_ignored(store, correlation):
    controller = CrudController(store, correlation)
    controller.map_clicked((1.0, 2.0))
    assert controller.state is CrudState.IDLE
    assert controller.pending_coords is None
    assert controller.submit(WorkoutInput(**running())) is None

    controller.map_ready((41.0, -8.0))
    controller.map_clicked((1.0, 2.0))
    assert controller.state is CrudState.PENDING_CREATE


def test_startup_with_record_missing_metric(storage_path, map_surface, list_surface):
    record = create_running((41.0, -8.0), 5.2, 24, 178).to_dict()
    record["pace"] = None
    storage_path.write_text(json.dumps({"workouts": [record]}))

    controller = build_controller(map_surface, list_surface, storage_path)
    controller.map_ready((41.0, -8.0))
    assert len(controller.store) == 0
    assert_aligned(controller, map_surface, list_surface)
