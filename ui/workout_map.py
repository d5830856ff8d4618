"""Map widget showing one popup marker per workout."""

from __future__ import annotations

from kivy.metrics import dp
from kivy.vector import Vector
from kivymd.uix.label import MDLabel
from kivymd.uix.card import MDCard
from kivy_garden.mapview import MapMarkerPopup, MapView

from backend.formatting import popup_text
from backend.workouts import Workout, WorkoutType

# Popup colours per activity, matching the list row accents.
POPUP_COLORS = {
    WorkoutType.RUNNING: (0.0, 0.77, 0.4, 1),
    WorkoutType.CYCLING: (1.0, 0.7, 0.0, 1),
}

# A touch moving further than this is a pan, not a click.
CLICK_TOLERANCE = dp(8)


class WorkoutMarker(MapMarkerPopup):
    """Marker whose popup stays open and shows the workout description."""

    def __init__(self, workout: Workout, **kwargs):
        lat, lng = workout.coords
        super().__init__(lat=lat, lon=lng, **kwargs)
        self.workout_id = workout.id
        self.card = MDCard(
            size_hint=(None, None),
            size=(dp(220), dp(40)),
            padding=dp(8),
        )
        self.label = MDLabel(text="", halign="center")
        self.card.add_widget(self.label)
        self.add_widget(self.card)
        self.show(workout)
        self.is_open = True

    def show(self, workout: Workout) -> None:
        self.label.text = popup_text(workout)
        self.card.md_bg_color = POPUP_COLORS[workout.type]


class WorkoutMapView(MapView):
    """``MapView`` that reports plain clicks through ``on_map_click``."""

    def __init__(self, **kwargs):
        self.register_event_type("on_map_click")
        super().__init__(**kwargs)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def on_touch_up(self, touch):
        handled = super().on_touch_up(touch)
        if touch.grab_current is not None or touch.is_mouse_scrolling:
            return handled
        if not self.collide_point(*touch.pos):
            return handled
        if Vector(touch.opos).distance(touch.pos) > CLICK_TOLERANCE:
            return handled
        if any(
            isinstance(child, WorkoutMarker) and child.collide_point(*touch.pos)
            for child in self.walk(restrict=True)
        ):
            return handled
        coord = self.get_latlon_at(*touch.pos)
        self.dispatch("on_map_click", (coord.lat, coord.lon))
        return True

    def on_map_click(self, coords):
        pass


class MapSurface:
    """Marker operations the correlation layer performs on the map."""

    def __init__(self, map_view: MapView) -> None:
        self.map_view = map_view

    def add_marker(self, workout: Workout) -> WorkoutMarker:
        marker = WorkoutMarker(workout)
        self.map_view.add_marker(marker)
        return marker

    def update_marker(self, marker: WorkoutMarker, workout: Workout) -> None:
        marker.show(workout)
        marker.is_open = True

    def remove_marker(self, marker: WorkoutMarker) -> None:
        self.map_view.remove_marker(marker)

    def set_view(self, coords, zoom: int) -> None:
        lat, lng = coords
        self.map_view.zoom = zoom
        self.map_view.center_on(lat, lng)
