"""Lifecycle controller for the active workout session.

:class:`SessionController` sits between the UI and the
:class:`~workout_engine.workout_session.WorkoutSession` state machine. It owns
the cross-cutting transitions (minimize, resume, abandon, finalize, discard)
that touch both the session and its store, and it pushes visibility and
navigation changes to listeners through Kivy properties and events instead of
letting the UI poll the store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from kivy.event import EventDispatcher
from kivy.properties import BooleanProperty

from . import DEFAULT_DB_PATH, DEFAULT_RECOVERY_BASE, DEFAULT_REST_DURATION
from . import settings
from .clock import SessionClock
from .errors import (
    EmptySessionFinalize,
    NoActiveSession,
    PersistenceUnavailable,
    SaveFailure,
)
from .history import make_history_lookup, make_save_endpoint
from .models import FinalizedSession, Session
from .session_store import SessionStore
from .utils import DEFAULT_SESSION_NAME_FORMAT
from .workout_session import WorkoutSession

# Navigation targets emitted through ``on_navigate``
NAV_ACTIVE_WORKOUT = "active_workout"
NAV_HOME = "home"
NAV_WORKOUTS = "workouts"

ABANDON_PROMPT_TEXT = (
    "Are you sure you want to abandon this session? "
    "Your unsaved progress will be lost."
)
DISCARD_PROMPT_TEXT = "This session is empty. No data will be saved."


class SessionController(EventDispatcher):
    """Coordinate session lifecycle transitions with the surrounding app.

    ``save_endpoint`` receives a :class:`FinalizedSession` and either returns
    a value (success) or raises / returns ``False`` (failure). ``prompt`` is
    any object with ``ask(text, on_confirm, on_cancel)``; without one,
    confirmations must be driven through :meth:`confirm_abandon` and
    :meth:`cancel_abandon`.
    """

    active = BooleanProperty(False)
    minimized = BooleanProperty(False)
    abandon_pending = BooleanProperty(False)
    saving = BooleanProperty(False)

    __events__ = (
        "on_navigate",
        "on_session_changed",
        "on_save_failed",
        "on_persistence_error",
    )

    def __init__(
        self,
        engine: WorkoutSession,
        save_endpoint: Callable[[FinalizedSession], object],
        *,
        prompt=None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.engine = engine
        self.store = engine.store
        self.save_endpoint = save_endpoint
        self.prompt = prompt
        engine.on_change = self._on_engine_change
        engine.on_persistence_error = self._on_persistence_error

    # default handlers required by EventDispatcher
    def on_navigate(self, target: str) -> None:
        pass

    def on_session_changed(self) -> None:
        pass

    def on_save_failed(self, error: Exception) -> None:
        pass

    def on_persistence_error(self, error: PersistenceUnavailable) -> None:
        pass

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_engine_change(self) -> None:
        if self.engine.is_active:
            self.active = True
        self.dispatch("on_session_changed")

    def _on_persistence_error(self, error: PersistenceUnavailable) -> None:
        self.dispatch("on_persistence_error", error)

    def _set_minimized(self, minimized: bool) -> None:
        try:
            self.store.set_minimized(minimized)
        except PersistenceUnavailable as exc:
            logging.exception("Could not persist minimized flag")
            self.dispatch("on_persistence_error", exc)
        self.minimized = minimized

    def _terminate(self, target: str) -> None:
        self.engine.terminate()
        self.abandon_pending = False
        self.minimized = False
        self.active = False
        self.dispatch("on_navigate", target)

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def restore(self) -> bool:
        """Reflect the persisted state at startup without creating a session."""

        self.active = self.store.has_session()
        self.minimized = self.active and self.store.is_minimized()
        return self.active

    def enter(self) -> Session:
        """Open the session view, creating the session on first entry."""

        session = self.engine.ensure_session()
        self.active = True
        if self.minimized or self.store.is_minimized():
            self._set_minimized(False)
        self.dispatch("on_navigate", NAV_ACTIVE_WORKOUT)
        return session

    def minimize(self) -> bool:
        if not self.active:
            return False
        self._set_minimized(True)
        self.dispatch("on_navigate", NAV_HOME)
        return True

    def resume(self) -> bool:
        if not self.active:
            return False
        self.engine.ensure_session()
        self._set_minimized(False)
        self.dispatch("on_navigate", NAV_ACTIVE_WORKOUT)
        return True

    def is_workout_active(self) -> bool:
        """Read the store directly, for callers that still poll."""

        return self.store.has_session()

    def is_workout_minimized(self) -> bool:
        return self.store.is_minimized()

    # ------------------------------------------------------------------
    # Abandon / discard
    # ------------------------------------------------------------------

    def abandon(self, require_confirmation: bool = True) -> bool:
        """Destroy the session, optionally behind a confirmation.

        Returns ``True`` once the session is gone. With confirmation the
        session survives until :meth:`confirm_abandon` runs, either from the
        prompt or from the caller.
        """

        if not self.active:
            return False
        if not require_confirmation:
            logging.info("Abandoning active session")
            self._terminate(NAV_HOME)
            return True
        self.propose_abandon()
        if self.prompt is not None:
            self.prompt.ask(
                ABANDON_PROMPT_TEXT,
                on_confirm=self.confirm_abandon,
                on_cancel=self.cancel_abandon,
            )
        return not self.active

    def propose_abandon(self) -> bool:
        if not self.active:
            return False
        self.abandon_pending = True
        return True

    def confirm_abandon(self) -> bool:
        if not self.abandon_pending:
            return False
        logging.info("Abandoning active session after confirmation")
        self._terminate(NAV_HOME)
        return True

    def cancel_abandon(self) -> None:
        self.abandon_pending = False

    def discard(self) -> bool:
        """Drop the session without saving anything."""

        logging.info("Discarding active session")
        self._terminate(NAV_WORKOUTS)
        return True

    def request_discard(self) -> bool:
        """Ask before discarding an empty session.

        Returns ``True`` once the session is gone.
        """

        if self.prompt is None:
            return self.discard()
        self.prompt.ask(
            DISCARD_PROMPT_TEXT,
            on_confirm=self.discard,
            on_cancel=lambda: None,
        )
        return not self.active

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def finalize(self, name: str, notes: str = ""):
        """Hand the completed session to the save endpoint.

        Persistence is cleared only after the endpoint succeeds; on failure
        the session stays active and untouched and :class:`SaveFailure` is
        raised so the caller can retry. Returns the endpoint's result.
        """

        if not self.active:
            raise NoActiveSession("No active session to finalize")
        session = self.engine.ensure_session()
        if not session.exercises:
            raise EmptySessionFinalize("Session has no exercises; discard it instead")
        name = (name or "").strip()
        if not name:
            raise ValueError("Session name is required")

        record = self.engine.build_finalized_record(name, notes or "")
        self.saving = True
        try:
            result = self.save_endpoint(record)
        except Exception as exc:
            logging.exception("Saving session '%s' failed", name)
            self.dispatch("on_save_failed", exc)
            raise SaveFailure(str(exc)) from exc
        finally:
            self.saving = False

        if result is False:
            error = SaveFailure(f"Save endpoint rejected session '{name}'")
            logging.error("%s", error)
            self.dispatch("on_save_failed", error)
            raise error

        logging.info(
            "Saved session '%s' (%d min, volume %d)",
            record.name,
            record.duration_minutes,
            record.total_volume,
        )
        self._terminate(NAV_WORKOUTS)
        return result


def build_controller(
    db_path: Path = DEFAULT_DB_PATH,
    recovery_base: Path = DEFAULT_RECOVERY_BASE,
    *,
    scheduler=None,
    prompt=None,
) -> SessionController:
    """Wire store, clock, state machine and SQLite history together."""

    store = SessionStore(recovery_base)
    store.init()
    engine = WorkoutSession(
        store,
        clock=SessionClock(scheduler),
        history_lookup=make_history_lookup(db_path),
        default_rest=int(settings.get_value("default_rest_seconds", DEFAULT_REST_DURATION)),
        name_format=settings.get_value("session_name_format", DEFAULT_SESSION_NAME_FORMAT),
    )
    controller = SessionController(engine, make_save_endpoint(db_path), prompt=prompt)
    controller.restore()
    return controller
