from datetime import datetime

from kivymd.uix.screen import MDScreen
from kivymd.uix.list import ThreeLineListItem
from kivy.app import App
from kivy.properties import StringProperty

from workout_engine.history import get_session_history


class WorkoutHistoryScreen(MDScreen):
    """Display a list of saved workouts and open their details.

    Attributes:
        return_to (str): Name of the screen to return to when the Back
            button is pressed. Defaults to ``"home"``.
    """

    return_to = StringProperty("home")
    """Name of the screen to return to when leaving the history screen."""

    def on_pre_enter(self, *args):
        """Populate the history list before the screen becomes visible."""
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self) -> None:
        """Fill the history list with saved workout sessions."""
        history = get_session_history()
        lst = self.ids.get("history_list")
        if not lst:
            return
        lst.clear_widgets()
        for entry in history:
            dt = datetime.fromtimestamp(entry["started_at"])
            records = entry.get("records_count") or 0
            summary = f"{entry['duration_minutes']} min, volume {entry['total_volume']}"
            if records:
                summary += f", {records} PR"
            item = ThreeLineListItem(
                text=entry["name"],
                secondary_text=dt.strftime("%H:%M %a %d/%m/%Y"),
                tertiary_text=summary,
                on_release=lambda _, sid=entry["id"]: self.open_session(sid),
            )
            lst.add_widget(item)

    def open_session(self, session_id: int) -> None:
        """Open the details screen for the selected session."""
        app = App.get_running_app()
        screen = app.root.get_screen("session_details")
        screen.show_session(session_id)
