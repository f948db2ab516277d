"""Utility helpers used across the engine and the UI."""

from __future__ import annotations

from datetime import datetime

from . import MAX_REST_SECONDS, REST_STEP_SECONDS

DEFAULT_SESSION_NAME_FORMAT = "Workout of %d/%m/%Y"


def rest_duration_options() -> list[int]:
    """Return the values offered by the rest picker (0s to 5min)."""

    return list(range(0, MAX_REST_SECONDS + 1, REST_STEP_SECONDS))


def snap_rest_duration(seconds: float) -> int:
    """Return the picker option closest to ``seconds``.

    Ties resolve to the lower option, matching how the picker snaps.
    """

    options = rest_duration_options()
    return min(options, key=lambda opt: (abs(opt - seconds), opt))


def format_time(seconds: int, show_hours: bool = False) -> str:
    """Format ``seconds`` as ``MM:SS`` or ``HH:MM:SS``."""

    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if show_hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    # without hours the minutes keep counting past 59
    return f"{seconds // 60:02d}:{secs:02d}"


def format_performance(weight: float, reps: int) -> str:
    """Return the ``"50kg x 10"`` string shown next to a set."""

    return f"{weight:g}kg x {reps}"


def default_session_name(
    timestamp: float, name_format: str = DEFAULT_SESSION_NAME_FORMAT
) -> str:
    """Return the default session name for a session started at ``timestamp``."""

    return datetime.fromtimestamp(timestamp).strftime(name_format)
