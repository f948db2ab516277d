import os
import sqlite3
from pathlib import Path
import sys
import pytest

# Kivy reads these at import time
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")
os.environ.setdefault("KIVY_LOG_MODE", "PYTHON")
os.environ.setdefault("KIVY_WINDOW", "mock")
os.environ.setdefault("KIVY_DPI", "96")
os.environ.setdefault("KIVY_METRICS_DENSITY", "1")

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from workout_engine import settings  # noqa: E402
from workout_engine.clock import SessionClock  # noqa: E402
from workout_engine.database import init_database  # noqa: E402
from workout_engine.lifecycle import SessionController  # noqa: E402
from workout_engine.session_store import SessionStore  # noqa: E402
from workout_engine.workout_session import WorkoutSession  # noqa: E402

from tests.utils import FakeClock, RecordingEndpoint  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Keep settings reads and writes inside the test's temp directory."""
    monkeypatch.setattr(settings, "SETTINGS_PATH", tmp_path / "settings.json")
    settings.reset_cache()
    yield
    settings.reset_cache()


@pytest.fixture
def fake_clock(monkeypatch) -> FakeClock:
    """Scheduler and wall clock driven manually by the test."""
    clock = FakeClock()
    monkeypatch.setattr("time.time", clock.time)
    return clock


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
    store = SessionStore(tmp_path / "active_session")
    store.init()
    return store


@pytest.fixture
def engine(store, fake_clock) -> WorkoutSession:
    return WorkoutSession(store, clock=SessionClock(fake_clock))


@pytest.fixture
def endpoint() -> RecordingEndpoint:
    return RecordingEndpoint()


@pytest.fixture
def controller(engine, endpoint) -> SessionController:
    return SessionController(engine, endpoint)


@pytest.fixture
def sample_db(tmp_path: Path) -> Path:
    """Create a temporary database with a small exercise catalog."""
    db_path = init_database(tmp_path / "workout.db")

    conn = sqlite3.connect(db_path)
    conn.executemany(
        "INSERT INTO library_exercises (name, muscle_group, equipment, is_user_created)"
        " VALUES (?, ?, ?, 0)",
        [
            ("Bench Press", "Chest", "Barbell"),
            ("Squat", "Legs", "Barbell"),
            ("Push-up", "Chest", None),
        ],
    )
    conn.commit()
    conn.close()
    return db_path
