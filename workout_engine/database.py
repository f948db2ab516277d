"""Schema setup and validation for the workout database."""
from __future__ import annotations

from pathlib import Path
import logging
import sqlite3
from typing import List, Tuple

from . import DATA_DIR, DEFAULT_DB_PATH

# SQL script creating every table used by the catalog and the history.
SCHEMA_PATH = DATA_DIR / "workout_schema.sql"

# Minimal set of tables expected to exist in any valid workout database.
REQUIRED_TABLES = [
    "library_exercises",
    "session_sessions",
    "session_exercises",
    "session_exercise_sets",
]


def init_database(db_path: Path = DEFAULT_DB_PATH, schema_path: Path = SCHEMA_PATH) -> Path:
    """Create ``db_path`` (if needed) and apply the schema script.

    The script only uses ``CREATE ... IF NOT EXISTS`` statements so running
    it against an existing database is harmless.
    """

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    script = Path(schema_path).read_text(encoding="utf-8")
    with sqlite3.connect(str(db_path)) as conn:
        conn.executescript(script)
    logging.info("Initialised workout database at %s", db_path)
    return db_path


def validate_database(db_path: Path) -> Tuple[bool, List[str]]:
    """Run validation checks on ``db_path``.

    Currently the function ensures all tables listed in
    :data:`REQUIRED_TABLES` exist. The returned tuple contains a boolean
    indicating success and a list of error messages.
    """
    errors: List[str] = []
    try:
        with sqlite3.connect(str(db_path)) as conn:
            cur = conn.cursor()
            for table in REQUIRED_TABLES:
                cur.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                    (table,),
                )
                if not cur.fetchone():
                    errors.append(f"missing table: {table}")
    except sqlite3.Error as exc:
        errors.append(str(exc))
    return (len(errors) == 0, errors)
