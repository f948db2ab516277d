from pathlib import Path

import pytest

from workout_engine import settings
from workout_engine.catalog import get_all_exercises
from workout_engine.clock import SessionClock
from workout_engine.errors import (
    EmptySessionFinalize,
    NoActiveSession,
    PersistenceUnavailable,
    SaveFailure,
)
from workout_engine.history import get_session_details, get_session_history
from workout_engine.lifecycle import (
    ABANDON_PROMPT_TEXT,
    DISCARD_PROMPT_TEXT,
    SessionController,
    build_controller,
)
from workout_engine.workout_session import WorkoutSession

from tests.utils import refs, slot_bytes


class FakePrompt:
    """Confirmation prompt answering every question with ``answer``."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.questions = []

    def ask(self, text, on_confirm, on_cancel):
        self.questions.append(text)
        if self.answer:
            on_confirm()
        else:
            on_cancel()


@pytest.fixture
def navigation(controller):
    targets = []
    controller.bind(on_navigate=lambda _inst, target: targets.append(target))
    return targets


def _fill_session(controller):
    """Two exercises with five completed sets, 2040 kg of volume."""
    engine = controller.engine
    engine.add_exercises(refs("Squat", "Lunge"))
    engine.update_set_field(0, 0, "reps", 5)
    engine.update_set_field(0, 0, "weight", 100)
    engine.add_set(0)
    engine.add_set(0)
    engine.update_set_field(1, 0, "reps", 12)
    engine.update_set_field(1, 0, "weight", 22.5)
    engine.add_set(1)
    for ex_idx, ex in enumerate(engine.exercises):
        for set_idx in range(len(ex.sets)):
            engine.toggle_set_completion(ex_idx, set_idx)


def test_restore_without_session(controller, store):
    assert controller.restore() is False
    assert controller.active is False
    assert not store.has_session()


def test_enter_creates_session_and_navigates(controller, store, navigation):
    controller.enter()
    assert controller.active
    assert store.has_session()
    assert navigation == ["active_workout"]


def test_minimize_and_resume(controller, store, navigation):
    seen = []
    controller.bind(minimized=lambda _inst, value: seen.append(value))
    controller.enter()

    assert controller.minimize()
    assert controller.minimized
    assert store.is_minimized()
    assert controller.is_workout_minimized()

    assert controller.resume()
    assert not controller.minimized
    assert not store.is_minimized()
    assert seen == [True, False]
    assert navigation == ["active_workout", "home", "active_workout"]


def test_minimize_without_session(controller, navigation):
    assert controller.minimize() is False
    assert controller.resume() is False
    assert navigation == []


def test_minimize_keeps_session_data(controller, store, fake_clock):
    controller.enter()
    controller.engine.add_exercises(refs("Bench"))
    controller.engine.toggle_set_completion(0, 0)
    controller.minimize()
    fake_clock.advance(5)
    assert controller.engine.total_volume == 160
    assert store.load().exercises[0].sets[0].is_completed


def test_restore_reflects_persisted_state(engine, store, endpoint, fake_clock):
    engine.ensure_session()
    store.set_minimized(True)
    engine.clock.stop()

    fresh = SessionController(
        WorkoutSession(store, clock=SessionClock(fake_clock)), endpoint
    )
    assert fresh.restore() is True
    assert fresh.active
    assert fresh.minimized
    assert fresh.is_workout_active()
    assert not fresh.engine.is_active


def test_finalize_saves_and_clears(controller, store, endpoint, fake_clock, navigation):
    controller.enter()
    _fill_session(controller)
    fake_clock.now += 1805

    result = controller.finalize("Leg Day", "tough")

    assert result == 1
    record = endpoint.records[-1]
    assert record.name == "Leg Day"
    assert record.notes == "tough"
    assert record.duration_minutes == 30
    assert record.total_volume == 2040
    assert record.completed_set_count == 5
    assert len(record.exercises) == 2
    assert not any(p.exists() for p in store.slot_paths)
    assert not store.flag_path.exists()
    assert not controller.active
    assert not controller.engine.is_active
    assert navigation[-1] == "workouts"


def test_failed_save_leaves_session_untouched(controller, store, endpoint, fake_clock):
    failures = []
    controller.bind(on_save_failed=lambda _inst, error: failures.append(error))
    controller.enter()
    _fill_session(controller)
    fake_clock.now += 60
    before = slot_bytes(store)

    endpoint.error = RuntimeError("offline")
    with pytest.raises(SaveFailure):
        controller.finalize("Leg Day")

    assert slot_bytes(store) == before
    assert controller.active
    assert controller.engine.total_volume == 2040
    assert not controller.saving
    assert isinstance(failures[0], RuntimeError)

    endpoint.error = None
    controller.finalize("Leg Day")
    assert len(endpoint.records) == 2
    assert not store.has_session()


def test_rejected_save_raises(controller, store, endpoint):
    controller.enter()
    _fill_session(controller)
    before = slot_bytes(store)
    endpoint.result = False
    with pytest.raises(SaveFailure):
        controller.finalize("Leg Day")
    assert slot_bytes(store) == before
    assert controller.active


def test_finalize_requires_session(controller):
    with pytest.raises(NoActiveSession):
        controller.finalize("Leg Day")


def test_finalize_empty_session(controller, store, endpoint):
    controller.enter()
    with pytest.raises(EmptySessionFinalize):
        controller.finalize("Leg Day")
    assert store.has_session()
    assert endpoint.records == []


@pytest.mark.parametrize("name", ["", "   ", None])
def test_finalize_requires_name(controller, endpoint, name):
    controller.enter()
    controller.engine.add_exercises(refs("Bench"))
    with pytest.raises(ValueError):
        controller.finalize(name)
    assert endpoint.records == []
    assert controller.active


def test_discard_drops_session(controller, store, endpoint, navigation):
    controller.enter()
    assert controller.discard()
    assert not store.has_session()
    assert not controller.active
    assert endpoint.records == []
    assert navigation[-1] == "workouts"


def test_request_discard_without_prompt(controller, store):
    controller.enter()
    assert controller.request_discard()
    assert not store.has_session()


def test_request_discard_declined(engine, endpoint, store):
    prompt = FakePrompt(answer=False)
    controller = SessionController(engine, endpoint, prompt=prompt)
    controller.enter()
    assert controller.request_discard() is False
    assert prompt.questions == [DISCARD_PROMPT_TEXT]
    assert store.has_session()


def test_abandon_waits_for_confirmation(controller, store, navigation):
    controller.enter()
    controller.engine.add_exercises(refs("Bench"))
    controller.engine.toggle_set_completion(0, 0)
    before = slot_bytes(store)

    assert controller.abandon() is False
    assert controller.abandon_pending
    controller.cancel_abandon()

    assert not controller.abandon_pending
    assert controller.active
    assert controller.engine.total_volume == 160
    assert slot_bytes(store) == before
    assert controller.confirm_abandon() is False
    assert navigation == ["active_workout"]


def test_confirmed_abandon(controller, store, navigation):
    controller.enter()
    controller.abandon()
    assert controller.confirm_abandon()
    assert not controller.active
    assert not controller.abandon_pending
    assert not store.has_session()
    assert navigation[-1] == "home"


def test_abandon_without_confirmation(controller, store):
    controller.enter()
    assert controller.abandon(require_confirmation=False)
    assert not store.has_session()


def test_abandon_without_session(controller):
    assert controller.abandon() is False
    assert not controller.abandon_pending


def test_abandon_through_prompt(engine, endpoint, store):
    prompt = FakePrompt(answer=True)
    controller = SessionController(engine, endpoint, prompt=prompt)
    controller.enter()
    assert controller.abandon() is True
    assert prompt.questions == [ABANDON_PROMPT_TEXT]
    assert not store.has_session()


def test_abandon_declined_through_prompt(engine, endpoint, store):
    controller = SessionController(engine, endpoint, prompt=FakePrompt(answer=False))
    controller.enter()
    before = slot_bytes(store)
    assert controller.abandon() is False
    assert not controller.abandon_pending
    assert controller.active
    assert slot_bytes(store) == before


def test_ticks_push_session_changes(controller, fake_clock):
    changes = []
    controller.bind(on_session_changed=lambda _inst: changes.append(1))
    controller.enter()
    count = len(changes)
    fake_clock.advance(3)
    assert len(changes) == count + 3


def test_persistence_errors_are_dispatched(controller, store, monkeypatch):
    errors = []
    controller.bind(on_persistence_error=lambda _inst, error: errors.append(error))
    controller.enter()

    def failing_save(session):
        raise PersistenceUnavailable("read-only")

    monkeypatch.setattr(store, "save", failing_save)
    controller.engine.add_exercises(refs("Bench"))
    assert len(errors) == 1
    assert controller.engine.exercises[0].name == "Bench"


def test_build_controller_round_trip(sample_db, tmp_path, fake_clock):
    settings.set_value("default_rest_seconds", 60)
    controller = build_controller(sample_db, tmp_path / "active", scheduler=fake_clock)
    assert controller.engine.default_rest == 60
    assert controller.active is False

    bench = [ref for ref in get_all_exercises(sample_db) if ref.name == "Bench Press"]
    controller.enter()
    controller.engine.add_exercises(bench)
    controller.engine.toggle_set_completion(0, 0)
    session_id = controller.finalize("Chest Day")

    history = get_session_history(db_path=sample_db)
    assert [h["name"] for h in history] == ["Chest Day"]
    assert get_session_details(session_id, sample_db)["total_volume"] == 160

    controller.enter()
    controller.engine.add_exercises(bench)
    assert controller.engine.exercises[0].sets[0].prior_performance == "20kg x 8"
    assert controller.engine.exercises[0].rest_duration_seconds == 60


def test_teardown_failure_after_save_is_dispatched(controller, store, endpoint, monkeypatch):
    errors = []
    controller.bind(on_persistence_error=lambda _inst, error: errors.append(error))
    controller.enter()
    _fill_session(controller)
    original_unlink = Path.unlink

    def unlink(self, *args, **kwargs):
        if self == store.primary:
            raise PermissionError("locked")
        return original_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", unlink)
    assert controller.finalize("Chest") == 1

    assert len(endpoint.records) == 1
    assert controller.active is False
    assert len(errors) == 1
    assert isinstance(errors[0], PersistenceUnavailable)
    assert controller.engine.persistence_error is errors[0]
    assert store.primary.exists()
