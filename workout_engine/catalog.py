"""Exercise catalog helpers.

Read access to the ``library_exercises`` table. The active session copies the
returned :class:`~workout_engine.models.ExerciseRef` fields when an exercise is
added and never queries the catalog again for that session.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from . import DEFAULT_DB_PATH
from .models import ExerciseRef


def get_all_exercises(
    db_path: Path = DEFAULT_DB_PATH,
    *,
    muscle_group: str | None = None,
) -> list[ExerciseRef]:
    """Return every exercise in the catalog ordered by name.

    When ``muscle_group`` is given only exercises of that group are returned.
    """

    query = "SELECT id, name, muscle_group FROM library_exercises WHERE deleted = 0"
    params: tuple = ()
    if muscle_group is not None:
        query += " AND muscle_group = ?"
        params = (muscle_group,)
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(query + " ORDER BY name", params)
        return [ExerciseRef(id=i, name=n, muscle_group=g) for i, n, g in cursor.fetchall()]


def get_exercise(exercise_id: int, db_path: Path = DEFAULT_DB_PATH) -> ExerciseRef | None:
    """Return the catalog entry for ``exercise_id`` or ``None``."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, name, muscle_group FROM library_exercises WHERE id = ? AND deleted = 0",
            (exercise_id,),
        )
        row = cursor.fetchone()
    if not row:
        return None
    return ExerciseRef(id=row[0], name=row[1], muscle_group=row[2])


def get_muscle_groups(db_path: Path = DEFAULT_DB_PATH) -> list[str]:
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT DISTINCT muscle_group FROM library_exercises"
            " WHERE deleted = 0 AND muscle_group != '' ORDER BY muscle_group"
        )
        return [row[0] for row in cursor.fetchall()]


def add_exercise(
    name: str,
    muscle_group: str,
    db_path: Path = DEFAULT_DB_PATH,
    *,
    equipment: str | None = None,
    is_user_created: bool = True,
) -> ExerciseRef:
    """Insert a catalog entry and return it."""

    if not name.strip():
        raise ValueError("Exercise name is required")
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO library_exercises (name, muscle_group, equipment, is_user_created)"
            " VALUES (?, ?, ?, ?)",
            (name.strip(), muscle_group, equipment, int(is_user_created)),
        )
        conn.commit()
        return ExerciseRef(id=cursor.lastrowid, name=name.strip(), muscle_group=muscle_group)
