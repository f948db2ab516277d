from kivymd.uix.screen import MDScreen
from kivy.properties import NumericProperty, StringProperty

from workout_engine import MAX_REST_SECONDS, REST_STEP_SECONDS
from workout_engine.utils import format_time, snap_rest_duration


class RestPickerScreen(MDScreen):
    """Pick the rest duration of one exercise in 5 second steps."""

    exercise_index = NumericProperty(-1)
    seconds = NumericProperty(0)
    seconds_text = StringProperty("00:00")
    max_seconds = NumericProperty(MAX_REST_SECONDS)
    step = NumericProperty(REST_STEP_SECONDS)
    return_to = StringProperty("active_workout")

    def on_pre_enter(self, *args):
        active = self.manager.get_screen(self.return_to) if self.manager else None
        engine = active.engine if active is not None else None
        if engine is not None and 0 <= self.exercise_index < len(engine.exercises):
            self.seconds = engine.exercises[int(self.exercise_index)].rest_duration_seconds
        return super().on_pre_enter(*args)

    def on_seconds(self, *_):
        self.seconds_text = format_time(self.seconds)

    def apply(self) -> None:
        """Store the picked value and return to the active session."""
        active = self.manager.get_screen(self.return_to)
        active.set_rest_duration(int(self.exercise_index), snap_rest_duration(self.seconds))
        self.manager.current = self.return_to

    def cancel(self) -> None:
        self.manager.current = self.return_to
