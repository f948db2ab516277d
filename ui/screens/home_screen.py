from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivy.properties import BooleanProperty, ObjectProperty, StringProperty

from workout_engine.utils import format_time


class HomeScreen(MDScreen):
    """Landing screen with the resume bar for a minimized session.

    ``show_resume_bar`` follows the controller's ``active`` and ``minimized``
    properties, so the bar appears or disappears without polling the store.
    """

    controller = ObjectProperty(None, allownone=True)
    show_resume_bar = BooleanProperty(False)
    resume_text = StringProperty("")

    def on_pre_enter(self, *args):
        app = MDApp.get_running_app()
        controller = getattr(app, "controller", None)
        if controller is not None and controller is not self.controller:
            self.attach(controller)
        self._update_bar()
        return super().on_pre_enter(*args)

    def attach(self, controller) -> None:
        if self.controller is not None:
            self.controller.unbind(
                active=self._update_bar,
                minimized=self._update_bar,
                on_session_changed=self._update_bar,
            )
        self.controller = controller
        controller.bind(
            active=self._update_bar,
            minimized=self._update_bar,
            on_session_changed=self._update_bar,
        )
        self._update_bar()

    def _update_bar(self, *_):
        controller = self.controller
        self.show_resume_bar = bool(controller and controller.active and controller.minimized)
        if self.show_resume_bar and controller.engine.is_active:
            engine = controller.engine
            self.resume_text = (
                f"{engine.session.name}  {format_time(engine.elapsed_seconds, show_hours=True)}"
            )
        elif self.show_resume_bar:
            self.resume_text = "Workout in progress"
        else:
            self.resume_text = ""

    def start_workout(self) -> None:
        """Open the active session, creating it when none exists."""
        if self.controller:
            self.controller.enter()

    def resume_workout(self) -> None:
        if self.controller:
            self.controller.resume()
