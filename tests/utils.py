from pathlib import Path
import sqlite3

from workout_engine.models import ExerciseRef

START_TIME = 1_700_000_000.0


class _Event:
    def __init__(self, clock, callback, interval):
        self.clock = clock
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Manual stand-in for Kivy's Clock and ``time.time``."""

    def __init__(self, now: float = START_TIME):
        self.now = now
        self.events = []

    def time(self) -> float:
        return self.now

    def schedule_interval(self, callback, interval):
        event = _Event(self, callback, interval)
        self.events.append(event)
        return event

    @property
    def active_events(self):
        return [e for e in self.events if not e.cancelled]

    def advance(self, seconds: int) -> None:
        """Move time forward one second at a time, firing live events."""
        for _ in range(int(seconds)):
            self.now += 1
            for event in list(self.events):
                if event.cancelled:
                    continue
                if event.callback(event.interval) is False:
                    event.cancel()
        self.events = self.active_events


class RecordingEndpoint:
    """Save endpoint that records what it receives.

    Set ``error`` to make the next calls raise, or ``result`` to change the
    returned value.
    """

    def __init__(self, result=1):
        self.result = result
        self.error = None
        self.records = []

    def __call__(self, record):
        self.records.append(record)
        if self.error is not None:
            raise self.error
        return self.result


def refs(*names: str) -> list:
    """Return catalog refs with ids 1..n for ``names``."""
    return [ExerciseRef(id=i, name=name, muscle_group="") for i, name in enumerate(names, 1)]


def slot_bytes(store) -> list:
    """Raw contents of both recovery files."""
    return [Path(p).read_bytes() for p in store.slot_paths]


def count_rows(db_path: Path, table: str) -> int:
    conn = sqlite3.connect(str(db_path))
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()
