"""Input form for creating and editing workouts."""

from __future__ import annotations

from typing import Callable

from kivy.metrics import dp
from kivy.uix.spinner import Spinner
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDRaisedButton
from kivymd.uix.textfield import MDTextField

from backend.crud import WorkoutInput
from backend.workouts import WorkoutType


class WorkoutForm(MDBoxLayout):
    """Type selector plus distance, duration and the activity field.

    Only the field that belongs to the selected type is shown: cadence for
    running, elevation gain for cycling.
    """

    def __init__(self, on_submit: Callable[[WorkoutInput], None], **kwargs):
        super().__init__(
            orientation="vertical",
            spacing=dp(4),
            padding=dp(8),
            size_hint_y=None,
            **kwargs,
        )
        self.bind(minimum_height=self.setter("height"))
        self.on_submit = on_submit
        default_height = dp(48)

        self.type_input = Spinner(
            text=WorkoutType.RUNNING.value,
            values=[t.value for t in WorkoutType],
            size_hint_y=None,
            height=default_height,
        )
        self.type_input.bind(text=lambda *_: self._toggle_extra_field())
        self.distance_input = MDTextField(hint_text="Distance (km)", input_filter="float")
        self.duration_input = MDTextField(hint_text="Duration (min)", input_filter="float")
        self.cadence_input = MDTextField(hint_text="Cadence (step/min)", input_filter="float")
        self.elevation_input = MDTextField(hint_text="Elev Gain (m)", input_filter="float")

        for widget in (
            self.type_input,
            self.distance_input,
            self.duration_input,
            self.cadence_input,
            self.elevation_input,
        ):
            self.add_widget(widget)
        self.add_widget(
            MDRaisedButton(text="OK", on_release=lambda *_: self.submit())
        )
        self._toggle_extra_field()
        self.hide()

    # ------------------------------------------------------------------
    def _set_visible(self, widget, visible: bool) -> None:
        widget.opacity = 1 if visible else 0
        widget.disabled = not visible
        widget.height = dp(48) if visible else 0
        widget.size_hint_y = None

    def _toggle_extra_field(self) -> None:
        running = self.type_input.text == WorkoutType.RUNNING.value
        self._set_visible(self.cadence_input, running)
        self._set_visible(self.elevation_input, not running)

    def show(self) -> None:
        self.opacity = 1
        self.disabled = False
        self.distance_input.focus = True

    def hide(self) -> None:
        self.clean()
        self.opacity = 0
        self.disabled = True

    def clean(self) -> None:
        for field in (
            self.distance_input,
            self.duration_input,
            self.cadence_input,
            self.elevation_input,
        ):
            field.text = ""

    # ------------------------------------------------------------------
    def fill(self, values: WorkoutInput) -> None:
        """Show the form pre-filled with ``values``."""

        self.clean()
        self.type_input.text = values.type
        self.distance_input.text = values.distance
        self.duration_input.text = values.duration
        self.cadence_input.text = values.cadence
        self.elevation_input.text = values.elevation_gain
        self._toggle_extra_field()
        self.show()

    def read(self) -> WorkoutInput:
        return WorkoutInput(
            type=self.type_input.text,
            distance=self.distance_input.text,
            duration=self.duration_input.text,
            cadence=self.cadence_input.text,
            elevation_gain=self.elevation_input.text,
        )

    def submit(self) -> None:
        self.on_submit(self.read())
