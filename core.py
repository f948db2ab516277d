"""Entry point re-exporting the workout engine API for app code.

Screens import from here so the engine modules can move without touching
the UI layer.
"""

from __future__ import annotations

from workout_engine import (
    DEFAULT_DB_PATH,
    DEFAULT_RECOVERY_BASE,
    DEFAULT_REST_DURATION,
)
from workout_engine.catalog import get_all_exercises, get_exercise, get_muscle_groups
from workout_engine.database import init_database, validate_database
from workout_engine.errors import (
    EmptySessionFinalize,
    NoActiveSession,
    PersistenceUnavailable,
    SaveFailure,
    SessionError,
)
from workout_engine.history import (
    get_previous_performance,
    get_session_details,
    get_session_history,
    save_completed_session,
)
from workout_engine.lifecycle import (
    NAV_ACTIVE_WORKOUT,
    NAV_HOME,
    NAV_WORKOUTS,
    SessionController,
    build_controller,
)
from workout_engine.models import (
    ExerciseRef,
    FinalizedSession,
    PerformedExercise,
    Session,
    SetStatus,
    WorkoutSet,
)
from workout_engine.session_store import SessionStore
from workout_engine.utils import format_time, rest_duration_options
from workout_engine.workout_session import WorkoutSession

__all__ = [
    "DEFAULT_DB_PATH",
    "DEFAULT_RECOVERY_BASE",
    "DEFAULT_REST_DURATION",
    "get_all_exercises",
    "get_exercise",
    "get_muscle_groups",
    "init_database",
    "validate_database",
    "EmptySessionFinalize",
    "NoActiveSession",
    "PersistenceUnavailable",
    "SaveFailure",
    "SessionError",
    "get_previous_performance",
    "get_session_details",
    "get_session_history",
    "save_completed_session",
    "NAV_ACTIVE_WORKOUT",
    "NAV_HOME",
    "NAV_WORKOUTS",
    "SessionController",
    "build_controller",
    "ExerciseRef",
    "FinalizedSession",
    "PerformedExercise",
    "Session",
    "SetStatus",
    "WorkoutSet",
    "SessionStore",
    "format_time",
    "rest_duration_options",
    "WorkoutSession",
]
