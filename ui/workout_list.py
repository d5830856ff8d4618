"""List rows for workouts shown beside the map."""

from __future__ import annotations

from typing import Callable

from kivy.metrics import dp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDIconButton
from kivymd.uix.list import MDList, TwoLineListItem

from backend.formatting import row_summary
from backend.workouts import Workout


class WorkoutRow(MDBoxLayout):
    """One workout: description, details and edit/delete buttons."""

    def __init__(
        self,
        workout: Workout,
        on_select: Callable[[str], None],
        on_edit: Callable[[str], None],
        on_delete: Callable[[str], None],
        **kwargs,
    ):
        super().__init__(
            orientation="horizontal", size_hint_y=None, height=dp(72), **kwargs
        )
        self.workout_id = workout.id
        self.item = TwoLineListItem(
            on_release=lambda *_: on_select(self.workout_id),
        )
        self.add_widget(self.item)
        self.add_widget(
            MDIconButton(
                icon="pencil",
                on_release=lambda *_: on_edit(self.workout_id),
            )
        )
        self.add_widget(
            MDIconButton(
                icon="delete",
                on_release=lambda *_: on_delete(self.workout_id),
            )
        )
        self.show(workout)

    def show(self, workout: Workout) -> None:
        self.item.text = workout.description
        self.item.secondary_text = row_summary(workout)


class ListSurface:
    """Row operations the correlation layer performs on an ``MDList``.

    ``on_select``, ``on_edit`` and ``on_delete`` receive the workout id of
    the row the user interacted with.
    """

    def __init__(
        self,
        workout_list: MDList,
        on_select: Callable[[str], None],
        on_edit: Callable[[str], None],
        on_delete: Callable[[str], None],
    ) -> None:
        self.workout_list = workout_list
        self.on_select = on_select
        self.on_edit = on_edit
        self.on_delete = on_delete

    def add_row(self, workout: Workout, position: int) -> WorkoutRow:
        row = WorkoutRow(workout, self.on_select, self.on_edit, self.on_delete)
        # Kivy keeps children last-displayed-first.
        index = len(self.workout_list.children) - position
        self.workout_list.add_widget(row, index=index)
        return row

    def update_row(self, row: WorkoutRow, workout: Workout) -> None:
        row.show(workout)

    def remove_row(self, row: WorkoutRow) -> None:
        self.workout_list.remove_widget(row)
