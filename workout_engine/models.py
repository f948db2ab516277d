"""Typed records for the active workout session.

Sets are immutable: every edit replaces the set with a modified copy via
:func:`dataclasses.replace`. Exercises and the session itself are plain
containers owned by :class:`~workout_engine.workout_session.WorkoutSession`.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from . import (
    DEFAULT_REST_DURATION,
    DEFAULT_SET_REPS,
    DEFAULT_SET_REST_MINUTES,
    DEFAULT_SET_WEIGHT,
)


class SetStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ExerciseRef:
    """Catalog entry copied into a session when an exercise is added."""

    id: Any
    name: str
    muscle_group: str = ""

    @classmethod
    def from_mapping(cls, data: dict) -> "ExerciseRef":
        """Build a ref from a catalog row or a camelCase API payload."""

        return cls(
            id=data["id"],
            name=data["name"],
            muscle_group=data.get("muscle_group", data.get("muscleGroup", "")) or "",
        )


@dataclass(frozen=True)
class WorkoutSet:
    reps: int = DEFAULT_SET_REPS
    weight: float = DEFAULT_SET_WEIGHT
    rest_minutes: float = DEFAULT_SET_REST_MINUTES
    status: SetStatus = SetStatus.PENDING
    prior_performance: str | None = None
    is_personal_record: bool | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is SetStatus.COMPLETED

    @property
    def volume(self) -> float:
        return self.reps * self.weight

    def with_status(self, status: SetStatus) -> "WorkoutSet":
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "reps": self.reps,
            "weight": self.weight,
            "rest_minutes": self.rest_minutes,
            "status": self.status.value,
            "prior_performance": self.prior_performance,
            "is_personal_record": self.is_personal_record,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutSet":
        reps = int(data["reps"])
        weight = float(data["weight"])
        if reps < 0 or weight < 0:
            raise ValueError("reps and weight must be non-negative")
        return cls(
            reps=reps,
            weight=weight,
            rest_minutes=float(data.get("rest_minutes", DEFAULT_SET_REST_MINUTES)),
            status=SetStatus(data.get("status", SetStatus.PENDING.value)),
            prior_performance=data.get("prior_performance"),
            is_personal_record=data.get("is_personal_record"),
        )


@dataclass
class PerformedExercise:
    exercise_id: Any
    name: str
    muscle_group: str = ""
    rest_duration_seconds: int = DEFAULT_REST_DURATION
    sets: list[WorkoutSet] = field(default_factory=list)
    # display strings from the last saved session with this exercise
    previous_sets: list[str] = field(default_factory=list)

    def prior_performance_for(self, slot: int) -> str | None:
        if 0 <= slot < len(self.previous_sets):
            return self.previous_sets[slot]
        return None

    def to_dict(self) -> dict:
        return {
            "exercise_id": self.exercise_id,
            "name": self.name,
            "muscle_group": self.muscle_group,
            "rest_duration_seconds": self.rest_duration_seconds,
            "sets": [s.to_dict() for s in self.sets],
            "previous_sets": list(self.previous_sets),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PerformedExercise":
        return cls(
            exercise_id=data["exercise_id"],
            name=data["name"],
            muscle_group=data.get("muscle_group", ""),
            rest_duration_seconds=int(
                data.get("rest_duration_seconds", DEFAULT_REST_DURATION)
            ),
            sets=[WorkoutSet.from_dict(s) for s in data.get("sets", [])],
            previous_sets=list(data.get("previous_sets", [])),
        )


@dataclass
class Session:
    name: str
    started_at: float
    notes: str = ""
    exercises: list[PerformedExercise] = field(default_factory=list)
    total_volume: int = 0
    elapsed_seconds: int = 0
    rest_ends_at: float | None = None
    rest_remaining: int = 0
    rest_exercise_index: int | None = None

    @property
    def is_resting(self) -> bool:
        return self.rest_ends_at is not None

    @property
    def completed_set_count(self) -> int:
        return sum(1 for ex in self.exercises for s in ex.sets if s.is_completed)

    def to_dict(self) -> dict:
        """Return a JSON-serialisable representation of the session."""

        return {
            "name": self.name,
            "started_at": self.started_at,
            "notes": self.notes,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "total_volume": self.total_volume,
            "elapsed_seconds": self.elapsed_seconds,
            "rest_ends_at": self.rest_ends_at,
            "rest_remaining": self.rest_remaining,
            "rest_exercise_index": self.rest_exercise_index,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Reconstruct a :class:`Session` from ``data``.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` when ``data`` is
        not a session record.
        """

        rest_ends_at = data.get("rest_ends_at")
        rest_index = data.get("rest_exercise_index")
        return cls(
            name=str(data["name"]),
            started_at=float(data["started_at"]),
            notes=data.get("notes") or "",
            exercises=[PerformedExercise.from_dict(ex) for ex in data["exercises"]],
            total_volume=int(data.get("total_volume", 0)),
            elapsed_seconds=int(data.get("elapsed_seconds", 0)),
            rest_ends_at=float(rest_ends_at) if rest_ends_at is not None else None,
            rest_remaining=int(data.get("rest_remaining", 0)),
            rest_exercise_index=int(rest_index) if rest_index is not None else None,
        )


@dataclass(frozen=True)
class FinalizedSession:
    """Completed record handed to the save endpoint."""

    name: str
    started_at: float
    duration_minutes: int
    total_volume: int
    exercises: tuple[PerformedExercise, ...]
    notes: str = ""

    @classmethod
    def from_session(
        cls,
        session: Session,
        name: str,
        notes: str,
        elapsed_seconds: int | None = None,
    ) -> "FinalizedSession":
        if elapsed_seconds is None:
            elapsed_seconds = session.elapsed_seconds
        return cls(
            name=name,
            started_at=session.started_at,
            duration_minutes=int(elapsed_seconds) // 60,
            total_volume=session.total_volume,
            exercises=tuple(copy.deepcopy(session.exercises)),
            notes=notes,
        )

    @property
    def completed_set_count(self) -> int:
        return sum(1 for ex in self.exercises for s in ex.sets if s.is_completed)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "started_at": self.started_at,
            "duration_minutes": self.duration_minutes,
            "total_volume": self.total_volume,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "notes": self.notes,
        }
