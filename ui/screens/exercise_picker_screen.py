from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.list import OneLineAvatarIconListItem, IRightBodyTouch
from kivymd.uix.selectioncontrol import MDCheckbox
from kivy.properties import StringProperty

from workout_engine.catalog import get_all_exercises


class RightCheckbox(IRightBodyTouch, MDCheckbox):
    pass


class ExercisePickerScreen(MDScreen):
    """Choose catalog exercises to append to the active session."""

    return_to = StringProperty("active_workout")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.selected = []
        self.exercises = []

    def on_pre_enter(self, *args):
        self.selected = []
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self) -> None:
        self.exercises = get_all_exercises()
        lst = self.ids.get("exercise_list")
        if not lst:
            return
        lst.clear_widgets()
        for ref in self.exercises:
            item = OneLineAvatarIconListItem(text=ref.name)
            checkbox = RightCheckbox()
            checkbox.bind(active=lambda _cb, value, r=ref: self.toggle(r, value))
            item.add_widget(checkbox)
            lst.add_widget(item)

    def toggle(self, ref, selected: bool) -> None:
        if selected and ref not in self.selected:
            self.selected.append(ref)
        elif not selected and ref in self.selected:
            self.selected.remove(ref)

    def confirm(self) -> None:
        """Add the selected exercises in the order they were picked."""
        app = MDApp.get_running_app()
        controller = getattr(app, "controller", None)
        if controller is not None and self.selected:
            controller.engine.add_exercises(self.selected)
        self.selected = []
        if self.manager:
            self.manager.current = self.return_to
