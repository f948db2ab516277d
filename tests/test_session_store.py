import json
from pathlib import Path

import pytest

from workout_engine.errors import PersistenceUnavailable
from workout_engine.models import PerformedExercise, Session, WorkoutSet
from workout_engine.session_store import SessionStore


def _session():
    return Session(
        name="Leg Day",
        started_at=1000.0,
        exercises=[PerformedExercise(exercise_id=1, name="Squat", sets=[WorkoutSet()])],
    )


def test_empty_store(store):
    assert store.load() is None
    assert not store.has_session()
    assert not store.is_minimized()


def test_save_writes_both_files(store):
    store.save(_session())
    primary, backup = store.slot_paths
    assert primary.name == "active_session_1.json"
    assert backup.name == "active_session_2.json"
    assert primary.read_bytes() == backup.read_bytes()
    assert store.load() == _session()


def test_backup_is_used_when_primary_is_corrupt(store):
    store.save(_session())
    store.primary.write_text("{not json", encoding="utf-8")
    assert store.load() == _session()


def test_missing_primary_falls_back(store):
    store.save(_session())
    store.primary.unlink()
    assert store.has_session()


def test_corrupt_files_mean_no_session(store):
    store.save(_session())
    store.primary.write_text("", encoding="utf-8")
    store.backup.write_text('{"name": "x"}', encoding="utf-8")
    assert store.load() is None


def test_clear_removes_everything(store):
    store.save(_session())
    store.set_minimized(True)
    store.clear()
    assert not store.primary.exists()
    assert not store.backup.exists()
    assert not store.flag_path.exists()
    store.clear()


def test_minimized_flag_requires_session(store):
    store.set_minimized(True)
    assert not store.is_minimized()
    store.save(_session())
    assert store.is_minimized()
    store.set_minimized(False)
    assert not store.is_minimized()


def test_unwritable_location(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = SessionStore(blocker / "active_session")
    with pytest.raises(PersistenceUnavailable):
        store.init()
    with pytest.raises(PersistenceUnavailable):
        store.save(_session())


@pytest.mark.parametrize(
    "field, value",
    [("rest_ends_at", "soon"), ("rest_exercise_index", "first"), ("rest_ends_at", [1])],
)
def test_bad_rest_state_means_no_session(store, field, value):
    data = _session().to_dict()
    data[field] = value
    payload = json.dumps(data)
    for path in store.slot_paths:
        path.write_text(payload, encoding="utf-8")
    assert store.load() is None
    assert not store.has_session()


def test_numeric_strings_in_rest_state_are_converted(store):
    data = _session().to_dict()
    data.update(rest_ends_at="1090.5", rest_exercise_index="0")
    store.primary.write_text(json.dumps(data), encoding="utf-8")
    session = store.load()
    assert session.rest_ends_at == 1090.5
    assert session.rest_exercise_index == 0


def test_clear_reports_files_it_could_not_remove(store, monkeypatch):
    store.save(_session())
    store.set_minimized(True)
    original_unlink = Path.unlink

    def unlink(self, *args, **kwargs):
        if self == store.primary:
            raise PermissionError("locked")
        return original_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", unlink)
    with pytest.raises(PersistenceUnavailable):
        store.clear()
    assert store.primary.exists()
    assert not store.backup.exists()
    assert not store.flag_path.exists()
