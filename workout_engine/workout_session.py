import logging
import math
import time
from dataclasses import replace
from typing import Callable, Iterable

from . import (
    DEFAULT_REST_DURATION,
    DEFAULT_SET_REST_MINUTES,
    FALLBACK_SET_REPS,
    FALLBACK_SET_WEIGHT,
)
from .clock import SessionClock
from .errors import IllegalFieldEdit, InvalidIndex, PersistenceUnavailable
from .models import (
    ExerciseRef,
    FinalizedSession,
    PerformedExercise,
    Session,
    SetStatus,
    WorkoutSet,
)
from .session_store import SessionStore
from .utils import DEFAULT_SESSION_NAME_FORMAT, default_session_name, snap_rest_duration
from .volume import compute_total_volume

EDITABLE_SET_FIELDS = ("reps", "weight")


class WorkoutSession:
    """State machine owning the single active workout session.

    The engine starts in the *no session* state; :meth:`ensure_session`
    restores the persisted session or creates a new one. Every mutating
    operation is a no-op returning ``False`` while no session exists. Each
    successful mutation recomputes the volume where sets are involved and is
    written through to the :class:`SessionStore` before the call returns.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        clock: SessionClock | None = None,
        history_lookup: Callable[[object], list[str]] | None = None,
        default_rest: int = DEFAULT_REST_DURATION,
        name_format: str = DEFAULT_SESSION_NAME_FORMAT,
        on_change: Callable[[], None] | None = None,
        on_persistence_error: Callable[[PersistenceUnavailable], None] | None = None,
    ):
        self.store = store
        self.clock = clock or SessionClock()
        self.history_lookup = history_lookup
        self.default_rest = default_rest
        self.name_format = name_format
        self.on_change = on_change
        self.on_persistence_error = on_persistence_error
        self.session: Session | None = None
        # last write failure, cleared by the next successful write
        self.persistence_error: PersistenceUnavailable | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.session is not None

    @property
    def exercises(self) -> list[PerformedExercise]:
        return self.session.exercises if self.session else []

    @property
    def total_volume(self) -> int:
        return self.session.total_volume if self.session else 0

    @property
    def elapsed_seconds(self) -> int:
        return self.session.elapsed_seconds if self.session else 0

    @property
    def rest_remaining(self) -> int:
        return self.session.rest_remaining if self.session else 0

    @property
    def is_resting(self) -> bool:
        return bool(self.session and self.session.is_resting)

    @property
    def completed_set_count(self) -> int:
        return self.session.completed_set_count if self.session else 0

    def ensure_session(self) -> Session:
        """Return the active session, restoring or creating it if needed."""

        if self.session is not None:
            return self.session

        restored = self.store.load()
        if restored is not None:
            logging.info("Recovered active session '%s'", restored.name)
            self.session = restored
            self._recompute_volume()
        else:
            now = time.time()
            self.session = Session(
                name=default_session_name(now, self.name_format), started_at=now
            )
            logging.info("Started new session '%s'", self.session.name)

        self.session.elapsed_seconds = self._current_elapsed()
        self._resume_rest()
        self._commit()
        self.clock.start_elapsed(self.tick_elapsed)
        return self.session

    def terminate(self) -> None:
        """Drop the session and tear down its persistence."""

        self.clock.stop()
        self.session = None
        try:
            self.store.clear()
        except PersistenceUnavailable as exc:
            logging.exception("Recovery files survived session teardown")
            self.persistence_error = exc
            if self.on_persistence_error:
                self.on_persistence_error(exc)
        self._notify()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _exercise(self, index: int) -> PerformedExercise:
        exercises = self.session.exercises
        if not 0 <= index < len(exercises):
            raise InvalidIndex(f"No exercise at position {index}")
        return exercises[index]

    def _set(self, exercise_index: int, set_index: int) -> tuple[PerformedExercise, WorkoutSet]:
        exercise = self._exercise(exercise_index)
        if not 0 <= set_index < len(exercise.sets):
            raise InvalidIndex(
                f"No set at position {set_index} for exercise {exercise_index}"
            )
        return exercise, exercise.sets[set_index]

    def _recompute_volume(self) -> None:
        self.session.total_volume = compute_total_volume(self.session.exercises)

    def _current_elapsed(self) -> int:
        elapsed = int(time.time() - self.session.started_at)
        return max(self.session.elapsed_seconds, elapsed)

    def _lookup_previous(self, exercise_id) -> list[str]:
        if self.history_lookup is None:
            return []
        try:
            return list(self.history_lookup(exercise_id))
        except Exception:
            logging.exception("Previous performance lookup failed for %s", exercise_id)
            return []

    def _notify(self) -> None:
        if self.on_change:
            self.on_change()

    def _commit(self) -> None:
        """Write the session through to the store and notify listeners."""

        try:
            self.store.save(self.session)
        except PersistenceUnavailable as exc:
            logging.exception("Active session could not be persisted")
            self.persistence_error = exc
            if self.on_persistence_error:
                self.on_persistence_error(exc)
        else:
            self.persistence_error = None
        self._notify()

    # ------------------------------------------------------------------
    # Clock callbacks
    # ------------------------------------------------------------------

    def tick_elapsed(self) -> None:
        if self.session is None:
            return
        elapsed = self._current_elapsed()
        if elapsed != self.session.elapsed_seconds:
            self.session.elapsed_seconds = elapsed
            self._commit()

    def tick_rest(self) -> bool:
        """Advance the rest countdown; return ``False`` once it is over."""

        if self.session is None or self.session.rest_ends_at is None:
            return False
        remaining = max(0, math.ceil(self.session.rest_ends_at - time.time()))
        self.session.rest_remaining = remaining
        if remaining == 0:
            self._clear_rest()
            self._commit()
            return False
        self._commit()
        return True

    def _clear_rest(self) -> None:
        self.session.rest_ends_at = None
        self.session.rest_remaining = 0
        self.session.rest_exercise_index = None

    def _start_rest(self, exercise_index: int, seconds: int) -> None:
        if seconds <= 0:
            self.clock.disarm_rest()
            self._clear_rest()
            return
        self.session.rest_ends_at = time.time() + seconds
        self.session.rest_remaining = seconds
        self.session.rest_exercise_index = exercise_index
        self.clock.arm_rest(self.tick_rest)

    def _cancel_rest(self) -> None:
        self.clock.disarm_rest()
        self._clear_rest()

    def _resume_rest(self) -> None:
        """Re-arm a countdown persisted by a previous run, if still running."""

        if self.session.rest_ends_at is None:
            return
        remaining = math.ceil(self.session.rest_ends_at - time.time())
        if remaining > 0:
            self.session.rest_remaining = remaining
            self.clock.arm_rest(self.tick_rest)
        else:
            self._clear_rest()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_exercises(self, refs: Iterable[ExerciseRef | dict]) -> int:
        """Append one exercise per catalog ref; return how many were added."""

        if self.session is None:
            return 0
        added = 0
        for ref in refs:
            if not isinstance(ref, ExerciseRef):
                ref = ExerciseRef.from_mapping(ref)
            exercise = PerformedExercise(
                exercise_id=ref.id,
                name=ref.name,
                muscle_group=ref.muscle_group,
                rest_duration_seconds=self.default_rest,
                previous_sets=self._lookup_previous(ref.id),
            )
            exercise.sets.append(
                WorkoutSet(prior_performance=exercise.prior_performance_for(0))
            )
            self.session.exercises.append(exercise)
            added += 1
        if added:
            self._recompute_volume()
            self._commit()
        return added

    def remove_exercise(self, index: int) -> bool:
        if self.session is None:
            return False
        try:
            self._exercise(index)
        except InvalidIndex as exc:
            logging.warning("Exercise removal ignored: %s", exc)
            return False

        del self.session.exercises[index]
        # a running countdown keeps going; only its position reference moves
        rest_index = self.session.rest_exercise_index
        if rest_index is not None:
            if rest_index == index:
                self.session.rest_exercise_index = None
            elif rest_index > index:
                self.session.rest_exercise_index = rest_index - 1
        self._recompute_volume()
        self._commit()
        return True

    def add_set(self, exercise_index: int) -> bool:
        """Append a pending set cloned from the last set of the exercise."""

        if self.session is None:
            return False
        try:
            exercise = self._exercise(exercise_index)
        except InvalidIndex as exc:
            logging.warning("Set creation ignored: %s", exc)
            return False

        slot = len(exercise.sets)
        prior = exercise.prior_performance_for(slot)
        if exercise.sets:
            new_set = replace(
                exercise.sets[-1],
                status=SetStatus.PENDING,
                prior_performance=prior,
                is_personal_record=None,
            )
        else:
            new_set = WorkoutSet(
                reps=FALLBACK_SET_REPS,
                weight=FALLBACK_SET_WEIGHT,
                rest_minutes=DEFAULT_SET_REST_MINUTES,
                prior_performance=prior,
            )
        exercise.sets.append(new_set)
        self._recompute_volume()
        self._commit()
        return True

    @staticmethod
    def _coerce_field(field: str, value) -> int | float:
        if field not in EDITABLE_SET_FIELDS:
            raise KeyError(f"Unknown set field '{field}'")
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid {field} value: {value!r}") from exc
        if not math.isfinite(number) or number < 0:
            raise ValueError(f"{field} must be a non-negative number")
        if field == "reps":
            if number != int(number):
                raise ValueError("reps must be a whole number")
            return int(number)
        return number

    def update_set_field(
        self, exercise_index: int, set_index: int, field: str, value
    ) -> bool:
        """Overwrite ``reps`` or ``weight`` of a set that is not completed."""

        if self.session is None:
            return False
        coerced = self._coerce_field(field, value)
        try:
            exercise, current = self._set(exercise_index, set_index)
            if current.is_completed:
                raise IllegalFieldEdit(
                    f"Set {set_index} of exercise {exercise_index} is completed"
                )
        except (InvalidIndex, IllegalFieldEdit) as exc:
            logging.warning("Set edit ignored: %s", exc)
            return False

        exercise.sets[set_index] = replace(current, **{field: coerced})
        self._recompute_volume()
        self._commit()
        return True

    def toggle_set_completion(self, exercise_index: int, set_index: int) -> bool:
        """Flip a set between pending and completed.

        Completing a set (re)starts the rest countdown from the exercise's
        current rest duration; reopening it cancels any countdown.
        """

        if self.session is None:
            return False
        try:
            exercise, current = self._set(exercise_index, set_index)
        except InvalidIndex as exc:
            logging.warning("Set toggle ignored: %s", exc)
            return False

        if current.is_completed:
            exercise.sets[set_index] = current.with_status(SetStatus.PENDING)
            self._recompute_volume()
            self._cancel_rest()
        else:
            exercise.sets[set_index] = current.with_status(SetStatus.COMPLETED)
            self._recompute_volume()
            self._start_rest(exercise_index, exercise.rest_duration_seconds)
        self._commit()
        return True

    def set_rest_duration(self, exercise_index: int, seconds: float) -> bool:
        """Set the rest length of an exercise, snapped to the picker grid.

        A countdown already running keeps its original end time.
        """

        if self.session is None:
            return False
        try:
            exercise = self._exercise(exercise_index)
        except InvalidIndex as exc:
            logging.warning("Rest duration change ignored: %s", exc)
            return False
        exercise.rest_duration_seconds = snap_rest_duration(seconds)
        self._commit()
        return True

    def update_metadata(self, name: str | None = None, notes: str | None = None) -> bool:
        if self.session is None:
            return False
        if name is not None:
            self.session.name = name
        if notes is not None:
            self.session.notes = notes
        self._commit()
        return True

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def build_finalized_record(self, name: str, notes: str = "") -> FinalizedSession:
        """Return the immutable record to hand to the save endpoint.

        The session itself is left untouched so a failed save can be retried.
        """

        return FinalizedSession.from_session(
            self.session, name, notes, elapsed_seconds=self._current_elapsed()
        )
