"""Handicap stroke allocation per hole.

Two conventions live side by side:

* ``WHOLE_FIELD`` gives every hole ``handicap // 18`` strokes and one more on
  each hole whose difficulty rank is within ``handicap % 18``. The leaderboard
  and the pool use it, so every player's strokes sum to their course handicap.
* ``DIFFERENTIAL`` is the match-play convention used by skins: strokes are
  relative to a baseline (the lowest handicap in the group) and dealt one per
  hole, hardest first, wrapping around for as many passes as needed.

Neither mode hands out negative strokes: a plus handicap (or a player below the
baseline) simply receives none.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum

from moneygame.models import HOLES_PER_ROUND, Hole


class AllocationMode(str, Enum):
    WHOLE_FIELD = "whole_field"
    DIFFERENTIAL = "differential"


def _rank(hole: Hole) -> int | None:
    # Ranks below 1 count as unranked.
    if hole.difficulty is None or hole.difficulty < 1:
        return None
    return hole.difficulty


def difficulty_order(holes: Iterable[Hole]) -> list[Hole]:
    """Hardest hole first; unranked holes go last, ties keep hole-number order."""
    return sorted(
        holes,
        key=lambda hole: (_rank(hole) is None, _rank(hole) or 0, hole.number),
    )


def whole_field_strokes(course_handicap: int, holes: Iterable[Hole]) -> dict[int, int]:
    handicap = max(0, course_handicap)
    base, remainder = divmod(handicap, HOLES_PER_ROUND)
    allocation: dict[int, int] = {}
    for hole in holes:
        rank = _rank(hole)
        extra = 1 if remainder and rank is not None and rank <= remainder else 0
        allocation[hole.number] = base + extra
    return allocation


def differential_strokes(strokes: int, holes: Iterable[Hole]) -> dict[int, int]:
    ordered = difficulty_order(holes)
    allocation = {hole.number: 0 for hole in ordered}
    if not ordered:
        return allocation
    remaining = max(0, strokes)
    idx = 0
    while remaining > 0:
        hole = ordered[idx % len(ordered)]
        allocation[hole.number] += 1
        remaining -= 1
        idx += 1
    return allocation


def allocate_strokes(
    course_handicap: int,
    holes: Iterable[Hole],
    mode: AllocationMode = AllocationMode.WHOLE_FIELD,
    baseline: int = 0,
) -> dict[int, int]:
    if mode is AllocationMode.DIFFERENTIAL:
        return differential_strokes(course_handicap - baseline, holes)
    return whole_field_strokes(course_handicap, holes)


def group_strokes(
    handicaps: Mapping[str, int],
    holes: Iterable[Hole],
    mode: AllocationMode = AllocationMode.DIFFERENTIAL,
) -> dict[str, dict[int, int]]:
    """Allocate for a whole group; differential mode measures from the group's minimum."""
    if not handicaps:
        return {}
    holes = list(holes)
    baseline = min(handicaps.values()) if mode is AllocationMode.DIFFERENTIAL else 0
    return {
        player_id: allocate_strokes(handicap, holes, mode=mode, baseline=baseline)
        for player_id, handicap in handicaps.items()
    }
