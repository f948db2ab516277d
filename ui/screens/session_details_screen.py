from __future__ import annotations

from kivymd.uix.screen import MDScreen
from kivymd.uix.list import MDList, OneLineListItem, TwoLineListItem
from kivy.app import App

from workout_engine.history import get_session_details
from workout_engine.utils import format_performance


class SessionDetailsScreen(MDScreen):
    """Display details for a saved workout session."""

    session_id: int | None = None

    def on_pre_enter(self, *args):
        if self.session_id is not None:
            self.populate()
        return super().on_pre_enter(*args)

    def show_session(self, session_id: int) -> None:
        """Load data for ``session_id`` and switch to this screen."""
        self.session_id = session_id
        app = App.get_running_app()
        app.root.current = "session_details"

    def populate(self) -> None:
        details = get_session_details(self.session_id)
        lst: MDList = self.ids.get("details_list")  # type: ignore[arg-type]
        if not lst:
            return
        lst.clear_widgets()
        if not details:
            lst.add_widget(OneLineListItem(text="No details found"))
            return
        lst.add_widget(OneLineListItem(text=details["name"]))
        lst.add_widget(
            OneLineListItem(
                text=f"{details['duration_minutes']} min, volume {details['total_volume']}"
            )
        )
        if details.get("notes"):
            lst.add_widget(OneLineListItem(text=details["notes"]))
        for ex in details.get("exercises", []):
            lst.add_widget(OneLineListItem(text=f"Exercise: {ex['name']}"))
            for number, s in enumerate(ex.get("sets", []), 1):
                status = s["status"]
                if s.get("is_personal_record"):
                    status += ", PR"
                item = TwoLineListItem(
                    text=f"Set {number}: {format_performance(s['weight'], s['reps'])}",
                    secondary_text=status,
                )
                lst.add_widget(item)
