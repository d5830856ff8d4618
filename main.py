import logging

from kivymd.app import MDApp
from kivy.clock import Clock
from kivy.uix.scrollview import ScrollView
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDRaisedButton
from kivymd.uix.list import MDList
from kivymd.toast import toast

from backend import settings as app_settings
from backend.bootstrap import build_controller
from backend.crud import CrudController, ValidationError
from backend.workout_store import NotFoundError
from ui.dialogs import ConfirmDialog
from ui.workout_form import WorkoutForm
from ui.workout_list import ListSurface
from ui.workout_map import MapSurface, WorkoutMapView


class WorkoutMapApp(MDApp):
    """Log runs and rides on a map.

    The app owns the widgets and forwards every user action to the
    :class:`CrudController`; all bookkeeping happens there.
    """

    controller: CrudController | None = None

    def build(self):
        self.zoom = int(app_settings.get_value("map_zoom_level"))
        self.start_coords = (
            float(app_settings.get_value("start_lat")),
            float(app_settings.get_value("start_lng")),
        )

        root = MDBoxLayout(orientation="horizontal")
        sidebar = MDBoxLayout(orientation="vertical", size_hint_x=0.4)
        self.form = WorkoutForm(on_submit=self.submit_workout)
        sidebar.add_widget(self.form)

        self.workout_list = MDList()
        scroll = ScrollView(do_scroll_y=True)
        scroll.add_widget(self.workout_list)
        sidebar.add_widget(scroll)
        sidebar.add_widget(
            MDRaisedButton(text="Reset", on_release=lambda *_: self.confirm_reset())
        )

        lat, lng = self.start_coords
        self.map_view = WorkoutMapView(zoom=self.zoom, lat=lat, lon=lng)
        self.map_view.bind(on_map_click=lambda _, coords: self.open_new_form(coords))

        root.add_widget(sidebar)
        root.add_widget(self.map_view)

        list_surface = ListSurface(
            self.workout_list,
            on_select=self.select_workout,
            on_edit=self.edit_workout,
            on_delete=self.delete_workout,
        )
        self.controller = build_controller(
            MapSurface(self.map_view), list_surface, zoom=self.zoom
        )
        return root

    def on_start(self):
        # The map needs a laid-out window before markers can be placed.
        Clock.schedule_once(lambda _dt: self.controller.map_ready(self.start_coords))

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------
    def open_new_form(self, coords) -> None:
        self.controller.map_clicked(coords)
        self.form.clean()
        self.form.show()

    def submit_workout(self, values) -> None:
        try:
            workout = self.controller.submit(values)
        except ValidationError as exc:
            toast(str(exc))
            return
        except NotFoundError:
            logging.exception("Edited workout disappeared")
            workout = None
        if workout is not None:
            logging.info("Saved workout %s", workout.id)
        self.form.hide()

    def select_workout(self, workout_id: str) -> None:
        try:
            self.controller.select(workout_id)
        except NotFoundError:
            logging.exception("Selected workout %s is not in the store", workout_id)
        self.form.hide()

    def edit_workout(self, workout_id: str) -> None:
        try:
            values = self.controller.begin_edit(workout_id)
        except NotFoundError:
            logging.exception("Workout %s to edit is not in the store", workout_id)
            return
        self.form.fill(values)

    def delete_workout(self, workout_id: str) -> None:
        ConfirmDialog(
            "Are you sure you want to delete this workout?",
            on_answer=lambda confirmed: self._delete(workout_id, confirmed),
        ).open()

    def _delete(self, workout_id: str, confirmed: bool) -> None:
        try:
            deleted = self.controller.delete(workout_id, confirmed)
        except NotFoundError:
            logging.exception("Workout %s to delete is not in the store", workout_id)
            return
        if deleted:
            self.form.hide()

    def confirm_reset(self) -> None:
        ConfirmDialog(
            "Delete every workout? This cannot be undone.",
            on_answer=self._reset,
            confirm_text="Reset",
        ).open()

    def _reset(self, confirmed: bool) -> None:
        if confirmed:
            self.controller.reset()
            self.form.hide()


if __name__ == "__main__":
    WorkoutMapApp().run()
