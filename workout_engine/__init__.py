"""Shared constants and globals for the workout engine modules."""

from __future__ import annotations

from pathlib import Path

# Values a freshly added exercise is seeded with
DEFAULT_REST_DURATION = 90
DEFAULT_SET_REPS = 8
DEFAULT_SET_WEIGHT = 20.0
DEFAULT_SET_REST_MINUTES = 1.5

# Template used by ``add_set`` when an exercise has no sets left to clone
FALLBACK_SET_REPS = 8
FALLBACK_SET_WEIGHT = 50.0

# The rest picker offers 0s to 5min in 5 second steps
REST_STEP_SECONDS = 5
MAX_REST_SECONDS = 300

# Both session tickers fire once per second
TICK_INTERVAL = 1.0

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

# Path to the SQLite database holding the exercise catalog and saved sessions
DEFAULT_DB_PATH = DATA_DIR / "workout.db"

# Base name of the recovery files backing the active session slot
DEFAULT_RECOVERY_BASE = DATA_DIR / "active_session"

__all__ = [
    "DEFAULT_REST_DURATION",
    "DEFAULT_SET_REPS",
    "DEFAULT_SET_WEIGHT",
    "DEFAULT_SET_REST_MINUTES",
    "FALLBACK_SET_REPS",
    "FALLBACK_SET_WEIGHT",
    "REST_STEP_SECONDS",
    "MAX_REST_SECONDS",
    "TICK_INTERVAL",
    "DATA_DIR",
    "DEFAULT_DB_PATH",
    "DEFAULT_RECOVERY_BASE",
]
