"""UI screen modules for WorkoutApp."""

from .active_workout_screen import ActiveWorkoutScreen, SetRow
from .exercise_picker_screen import ExercisePickerScreen
from .home_screen import HomeScreen
from .rest_picker_screen import RestPickerScreen
from .session_details_screen import SessionDetailsScreen
from .workout_history_screen import WorkoutHistoryScreen

__all__ = [
    "ActiveWorkoutScreen",
    "ExercisePickerScreen",
    "HomeScreen",
    "RestPickerScreen",
    "SessionDetailsScreen",
    "SetRow",
    "WorkoutHistoryScreen",
]
