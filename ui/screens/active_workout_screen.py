from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.label import MDLabel
from kivymd.uix.button import MDFlatButton, MDIconButton
from kivymd.uix.selectioncontrol import MDCheckbox
from kivymd.uix.textfield import MDTextField
from kivymd.toast import toast
from kivy.metrics import dp
from kivy.properties import BooleanProperty, ObjectProperty, StringProperty

from workout_engine.errors import EmptySessionFinalize, SaveFailure
from workout_engine.utils import format_time


class SetRow(MDBoxLayout):
    """One editable set: reps, weight and a completion checkbox."""

    def __init__(self, screen, exercise_index: int, set_index: int, workout_set, **kwargs):
        super().__init__(orientation="horizontal", size_hint_y=None, height=dp(48), **kwargs)
        self.screen = screen
        self.exercise_index = exercise_index
        self.set_index = set_index
        completed = workout_set.is_completed

        self.add_widget(MDLabel(text=str(set_index + 1), size_hint_x=0.1))
        self.add_widget(
            MDLabel(text=workout_set.prior_performance or "-", size_hint_x=0.3)
        )
        # Enter also unfocuses the field
        self.reps_field = MDTextField(
            text=str(workout_set.reps), input_filter="int", disabled=completed
        )
        self.reps_field.bind(
            focus=lambda inst, focused: screen.on_field_focus(
                exercise_index, set_index, "reps", inst, focused
            )
        )
        self.weight_field = MDTextField(
            text=f"{workout_set.weight:g}", input_filter="float", disabled=completed
        )
        self.weight_field.bind(
            focus=lambda inst, focused: screen.on_field_focus(
                exercise_index, set_index, "weight", inst, focused
            )
        )
        self.add_widget(self.reps_field)
        self.add_widget(self.weight_field)
        checkbox = MDCheckbox(active=completed, size_hint_x=0.15)
        checkbox.bind(
            on_release=lambda *_: screen.toggle_set(exercise_index, set_index)
        )
        self.add_widget(checkbox)


class ActiveWorkoutScreen(MDScreen):
    """Live view of the active session.

    The screen only renders controller state; it refreshes whenever the
    controller reports a session change, which includes every clock tick.
    """

    controller = ObjectProperty(None, allownone=True)
    session_name = StringProperty("")
    elapsed_text = StringProperty("00:00:00")
    rest_text = StringProperty("")
    volume_text = StringProperty("0")
    sets_text = StringProperty("0")
    is_resting = BooleanProperty(False)

    def on_pre_enter(self, *args):
        app = MDApp.get_running_app()
        controller = getattr(app, "controller", None)
        if controller is not None and controller is not self.controller:
            if self.controller is not None:
                self.controller.unbind(on_session_changed=self._on_session_changed)
            self.controller = controller
            controller.bind(on_session_changed=self._on_session_changed)
        if self.controller is not None and not self.controller.engine.is_active:
            self.controller.enter()
        self.populate()
        return super().on_pre_enter(*args)

    def _on_session_changed(self, *_):
        self.refresh()

    @property
    def engine(self):
        return self.controller.engine if self.controller else None

    def refresh(self) -> None:
        """Update the header labels from the session state."""
        engine = self.engine
        if engine is None or not engine.is_active:
            return
        self.session_name = engine.session.name
        self.elapsed_text = format_time(engine.elapsed_seconds, show_hours=True)
        self.is_resting = engine.is_resting
        self.rest_text = format_time(engine.rest_remaining) if engine.is_resting else ""
        self.volume_text = str(engine.total_volume)
        self.sets_text = str(engine.completed_set_count)

    def populate(self) -> None:
        """Rebuild the exercise list."""
        self.refresh()
        container = self.ids.get("exercise_list")
        engine = self.engine
        if container is None or engine is None:
            return
        container.clear_widgets()
        for ex_idx, exercise in enumerate(engine.exercises):
            header = MDBoxLayout(orientation="horizontal", size_hint_y=None, height=dp(48))
            header.add_widget(MDLabel(text=exercise.name, bold=True))
            header.add_widget(
                MDFlatButton(
                    text=format_time(exercise.rest_duration_seconds),
                    on_release=lambda *_, i=ex_idx: self.open_rest_picker(i),
                )
            )
            header.add_widget(
                MDIconButton(
                    icon="delete",
                    on_release=lambda *_, i=ex_idx: self.remove_exercise(i),
                )
            )
            container.add_widget(header)
            for set_idx, workout_set in enumerate(exercise.sets):
                container.add_widget(SetRow(self, ex_idx, set_idx, workout_set))
            container.add_widget(
                MDFlatButton(
                    text="+ Add set",
                    on_release=lambda *_, i=ex_idx: self.add_set(i),
                )
            )

    # ------------------------------------------------------------------
    # Session actions
    # ------------------------------------------------------------------

    def toggle_set(self, exercise_index: int, set_index: int) -> None:
        if self.engine and self.engine.toggle_set_completion(exercise_index, set_index):
            self.populate()

    def on_field_focus(self, exercise_index: int, set_index: int, field: str, instance, focused: bool) -> None:
        if not focused:
            self.update_field(exercise_index, set_index, field, instance.text)

    def update_field(self, exercise_index: int, set_index: int, field: str, text: str) -> None:
        """Apply a typed value; rows are only rebuilt when it is rejected."""
        if not self.engine:
            return
        try:
            self.engine.update_set_field(exercise_index, set_index, field, text or 0)
        except ValueError:
            toast(f"Invalid {field}")
            self.populate()
            return
        self.refresh()

    def add_set(self, exercise_index: int) -> None:
        if self.engine and self.engine.add_set(exercise_index):
            self.populate()

    def remove_exercise(self, exercise_index: int) -> None:
        if self.engine and self.engine.remove_exercise(exercise_index):
            self.populate()

    def open_rest_picker(self, exercise_index: int) -> None:
        if self.manager and self.manager.has_screen("rest_picker"):
            picker = self.manager.get_screen("rest_picker")
            picker.exercise_index = exercise_index
            self.manager.current = "rest_picker"

    def set_rest_duration(self, exercise_index: int, seconds: int) -> None:
        if self.engine and self.engine.set_rest_duration(exercise_index, seconds):
            self.populate()

    def minimize(self) -> None:
        if self.controller:
            self.controller.minimize()

    def abandon(self) -> None:
        if self.controller:
            self.controller.abandon(True)

    def finish(self, name: str, notes: str = "") -> None:
        """Save the session, or offer to discard it when it is empty."""
        if not self.controller:
            return
        try:
            self.controller.finalize(name, notes)
        except EmptySessionFinalize:
            self.controller.request_discard()
        except ValueError:
            toast("Session name is required")
        except SaveFailure:
            toast("Saving failed, please try again")
