"""Training volume helpers."""

from __future__ import annotations

import math
from typing import Iterable

from .models import PerformedExercise


def round_half_up(value: float) -> int:
    """Round ``value`` to the nearest int, halves away from zero."""

    return int(math.floor(value + 0.5))


def compute_total_volume(exercises: Iterable[PerformedExercise]) -> int:
    """Return the summed ``reps * weight`` of every completed set.

    The total is always recomputed from scratch so it cannot drift from the
    set collection.
    """

    raw = sum(s.volume for ex in exercises for s in ex.sets if s.is_completed)
    return round_half_up(raw)
