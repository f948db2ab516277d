"""Exceptions raised by the workout engine.

Index and edit-legality problems are recovered inside
:class:`~workout_engine.workout_session.WorkoutSession`, which logs them and
reports the operation as a no-op. Persistence and save problems are surfaced
to the caller.
"""


class SessionError(Exception):
    """Base class for all workout engine errors."""


class InvalidIndex(SessionError, IndexError):
    """An exercise or set position is outside the current bounds."""


class IllegalFieldEdit(SessionError):
    """``reps`` or ``weight`` was edited on a completed set."""


class NoActiveSession(SessionError):
    """The operation requires an active session but none exists."""


class EmptySessionFinalize(SessionError):
    """Finalize was requested for a session without any exercise."""


class PersistenceUnavailable(SessionError):
    """The recovery files could not be written."""


class SaveFailure(SessionError):
    """The save endpoint rejected a finalized session."""
