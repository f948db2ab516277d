"""Saved-session history backed by SQLite.

:func:`save_completed_session` is the save endpoint the lifecycle controller
hands finalized sessions to. The remaining helpers read the history back, for
the history screens and for the "previous performance" hint shown next to
each set of a newly added exercise.
"""

from __future__ import annotations

import functools
import sqlite3
import time
from pathlib import Path
from typing import Callable

from . import DEFAULT_DB_PATH
from .models import FinalizedSession, SetStatus
from .utils import format_performance
from .volume import compute_total_volume


def validate_finalized_session(record: FinalizedSession) -> list[str]:
    """Return a list of validation errors for ``record``."""

    errors: list[str] = []
    if not record.name or not record.name.strip():
        errors.append("Session name is required")
    if not record.exercises:
        errors.append("Session has no exercises")
    if record.duration_minutes < 0:
        errors.append("Session duration is negative")
    if record.total_volume != compute_total_volume(record.exercises):
        errors.append("Session volume does not match its completed sets")
    return errors


def _best_weight(cursor: sqlite3.Cursor, exercise_id) -> float | None:
    cursor.execute(
        """
        SELECT MAX(st.weight)
          FROM session_exercise_sets st
          JOIN session_exercises e ON st.session_exercise_id = e.id
          JOIN session_sessions s ON e.session_id = s.id
         WHERE e.exercise_id = ? AND st.status = ?
           AND st.deleted = 0 AND e.deleted = 0 AND s.deleted = 0
        """,
        (str(exercise_id), SetStatus.COMPLETED.value),
    )
    row = cursor.fetchone()
    return row[0] if row else None


def save_completed_session(
    record: FinalizedSession, db_path: Path = DEFAULT_DB_PATH
) -> int:
    """Persist a finalized ``record`` and return its new id.

    Completed sets lifting more than the best weight previously saved for the
    same exercise are flagged as personal records. The whole insert runs in a
    single transaction, so a failure leaves the history unchanged.
    """

    errors = validate_finalized_session(record)
    if errors:
        raise ValueError("; ".join(errors))

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        best_by_exercise = {
            ex.exercise_id: _best_weight(cursor, ex.exercise_id)
            for ex in record.exercises
        }

        cursor.execute(
            """
            INSERT INTO session_sessions
                (name, started_at, duration_minutes, total_volume, notes, saved_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.name.strip(),
                record.started_at,
                record.duration_minutes,
                record.total_volume,
                record.notes,
                time.time(),
            ),
        )
        session_id = cursor.lastrowid

        records_count = 0
        for ex_pos, ex in enumerate(record.exercises, 1):
            cursor.execute(
                """
                INSERT INTO session_exercises
                    (session_id, exercise_id, exercise_name, muscle_group, rest_time, position)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    str(ex.exercise_id),
                    ex.name,
                    ex.muscle_group,
                    ex.rest_duration_seconds,
                    ex_pos,
                ),
            )
            session_ex_id = cursor.lastrowid
            best = best_by_exercise[ex.exercise_id]
            for set_number, workout_set in enumerate(ex.sets, 1):
                is_record = False
                if workout_set.is_completed:
                    if best is not None and workout_set.weight > best:
                        is_record = True
                        records_count += 1
                    if best is None or workout_set.weight > best:
                        best = workout_set.weight
                cursor.execute(
                    """
                    INSERT INTO session_exercise_sets
                        (session_exercise_id, set_number, reps, weight, rest_minutes,
                         status, is_personal_record)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        session_ex_id,
                        set_number,
                        workout_set.reps,
                        workout_set.weight,
                        workout_set.rest_minutes,
                        workout_set.status.value,
                        int(is_record),
                    ),
                )
            best_by_exercise[ex.exercise_id] = best

        cursor.execute(
            "UPDATE session_sessions SET records_count = ? WHERE id = ?",
            (records_count, session_id),
        )
    return session_id


def make_save_endpoint(db_path: Path = DEFAULT_DB_PATH) -> Callable[[FinalizedSession], int]:
    """Return :func:`save_completed_session` bound to ``db_path``."""

    return functools.partial(save_completed_session, db_path=db_path)


def get_session_history(limit: int | None = None, db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Return saved workout sessions, most recent first.

    Each item contains ``id``, ``name``, ``started_at``, ``duration_minutes``,
    ``total_volume`` and ``records_count``. When ``limit`` is provided only
    that many newest sessions are returned.
    """

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        query = (
            "SELECT id, name, started_at, duration_minutes, total_volume, records_count"
            " FROM session_sessions WHERE deleted = 0"
            " ORDER BY started_at DESC, id DESC"
        )
        if limit is not None:
            cursor.execute(query + " LIMIT ?", (limit,))
        else:
            cursor.execute(query)
        rows = cursor.fetchall()
    return [
        {
            "id": sid,
            "name": name,
            "started_at": started,
            "duration_minutes": duration,
            "total_volume": volume,
            "records_count": records,
        }
        for sid, name, started, duration, volume, records in rows
    ]


def get_session_details(session_id: int, db_path: Path = DEFAULT_DB_PATH) -> dict:
    """Return full details for the saved session ``session_id``.

    The mapping mirrors :meth:`FinalizedSession.to_dict` plus ``id`` and
    ``records_count``; every set carries ``reps``, ``weight``, ``status`` and
    ``is_personal_record``. An unknown id yields an empty dict.
    """

    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT name, started_at, duration_minutes, total_volume, notes, records_count
              FROM session_sessions
             WHERE id = ? AND deleted = 0
            """,
            (session_id,),
        )
        row = cur.fetchone()
        if row is None:
            return {}
        name, started, duration, volume, notes, records = row

        cur.execute(
            """
            SELECT id, exercise_id, exercise_name, muscle_group, rest_time
              FROM session_exercises
             WHERE session_id = ? AND deleted = 0
             ORDER BY position
            """,
            (session_id,),
        )
        exercises: list[dict] = []
        for ex_id, exercise_id, ex_name, group, rest in cur.fetchall():
            cur.execute(
                """
                SELECT reps, weight, rest_minutes, status, is_personal_record
                  FROM session_exercise_sets
                 WHERE session_exercise_id = ? AND deleted = 0
                 ORDER BY set_number
                """,
                (ex_id,),
            )
            sets = [
                {
                    "reps": reps,
                    "weight": weight,
                    "rest_minutes": rest_minutes,
                    "status": status,
                    "is_personal_record": bool(pr),
                }
                for reps, weight, rest_minutes, status, pr in cur.fetchall()
            ]
            exercises.append(
                {
                    "exercise_id": exercise_id,
                    "name": ex_name,
                    "muscle_group": group,
                    "rest_duration_seconds": rest,
                    "sets": sets,
                }
            )

    return {
        "id": session_id,
        "name": name,
        "started_at": started,
        "duration_minutes": duration,
        "total_volume": volume,
        "notes": notes or "",
        "records_count": records,
        "exercises": exercises,
    }


def get_previous_performance(exercise_id, db_path: Path = DEFAULT_DB_PATH) -> list[str]:
    """Return ``"50kg x 10"`` strings for each set of the last saved instance.

    Only the most recent saved session containing ``exercise_id`` is used.
    Sets that were not completed in that session are listed as ``"-"`` so
    the strings stay aligned with set positions.
    """

    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT e.id
              FROM session_exercises e
              JOIN session_sessions s ON e.session_id = s.id
             WHERE e.exercise_id = ? AND e.deleted = 0 AND s.deleted = 0
             ORDER BY s.started_at DESC, s.id DESC, e.position
             LIMIT 1
            """,
            (str(exercise_id),),
        )
        row = cur.fetchone()
        if row is None:
            return []
        cur.execute(
            """
            SELECT reps, weight, status
              FROM session_exercise_sets
             WHERE session_exercise_id = ? AND deleted = 0
             ORDER BY set_number
            """,
            (row[0],),
        )
        return [
            format_performance(weight, reps) if status == SetStatus.COMPLETED.value else "-"
            for reps, weight, status in cur.fetchall()
        ]


def make_history_lookup(db_path: Path = DEFAULT_DB_PATH) -> Callable[[object], list[str]]:
    """Return :func:`get_previous_performance` bound to ``db_path``."""

    return functools.partial(get_previous_performance, db_path=db_path)
