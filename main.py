from kivymd.app import MDApp
from kivy.lang import Builder
from kivy.core.window import Window
from pathlib import Path
import logging
import os
import sys

# Register the screen classes used by main.kv
import ui.screens  # noqa: F401
from ui.dialogs import ConfirmDialogPrompt

from core import (
    DEFAULT_DB_PATH,
    DEFAULT_RECOVERY_BASE,
    build_controller,
    init_database,
)


if os.name == "nt" or sys.platform.startswith("win"):
    Window.size = (280, 280 * (20 / 9))


class WorkoutApp(MDApp):
    controller = None

    def build(self):
        init_database(DEFAULT_DB_PATH)
        self.controller = build_controller(
            DEFAULT_DB_PATH,
            DEFAULT_RECOVERY_BASE,
            prompt=ConfirmDialogPrompt(),
        )
        self.controller.bind(on_navigate=self._navigate)
        root = Builder.load_file(str(Path(__file__).with_name("main.kv")))
        if self.controller.active and not self.controller.minimized:
            logging.info("Reopening active session from a previous run")
            self.controller.engine.ensure_session()
            root.current = "active_workout"
        return root

    def _navigate(self, _controller, target: str) -> None:
        if self.root is not None:
            self.root.current = target

    def on_stop(self):
        if self.controller is not None:
            self.controller.engine.clock.stop()


if __name__ == "__main__":
    WorkoutApp().run()
