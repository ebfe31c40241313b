"""Read-only inputs shared by the leaderboard, skins and pool engines."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

HOLES_PER_ROUND = 18
FRONT_NINE_LAST_HOLE = 9
DEFAULT_SLOPE = 113
DEFAULT_COURSE_PAR = 72


class ScoringInputError(ValueError):
    pass


@dataclass(frozen=True)
class Hole:
    number: int
    par: int
    difficulty: int | None = None

    @property
    def is_front_nine(self) -> bool:
        return self.number <= FRONT_NINE_LAST_HOLE


@dataclass(frozen=True)
class TeeBox:
    name: str
    rating: float
    slope: int = DEFAULT_SLOPE


@dataclass(frozen=True)
class Player:
    player_id: str
    name: str
    handicap_index: float = 0.0


@dataclass(frozen=True)
class Course:
    name: str
    holes: tuple[Hole, ...] = ()
    tee_boxes: tuple[TeeBox, ...] = ()

    def __post_init__(self) -> None:
        holes = tuple(sorted(self.holes, key=lambda hole: hole.number))
        seen: set[int] = set()
        for hole in holes:
            if hole.number in seen:
                raise ScoringInputError(f"Course {self.name!r} lists hole {hole.number} more than once")
            if hole.par <= 0:
                raise ScoringInputError(f"Hole {hole.number} has a non-positive par ({hole.par})")
            seen.add(hole.number)
        object.__setattr__(self, "holes", holes)
        object.__setattr__(self, "tee_boxes", tuple(self.tee_boxes))

    @property
    def par(self) -> int:
        if not self.holes:
            return DEFAULT_COURSE_PAR
        return sum(hole.par for hole in self.holes)

    @property
    def hole_numbers(self) -> set[int]:
        return {hole.number for hole in self.holes}

    def hole(self, number: int) -> Hole | None:
        for hole in self.holes:
            if hole.number == number:
                return hole
        return None

    def tee_box(self, name: str | None) -> TeeBox | None:
        if name:
            normalized = name.strip().lower()
            for tee in self.tee_boxes:
                if tee.name.strip().lower() == normalized:
                    return tee
        return self.tee_boxes[0] if self.tee_boxes else None


@dataclass(frozen=True)
class Participant:
    """A player joined to one round.

    ``scores`` maps hole number to gross strokes and is sparse: a hole with
    no entry has not been played yet.
    """

    player: Player
    course_handicap: int
    scores: Mapping[int, int] = field(default_factory=dict)
    tee_box: TeeBox | None = None

    @property
    def player_id(self) -> str:
        return self.player.player_id

    @property
    def name(self) -> str:
        return self.player.name

    def gross(self, hole_number: int) -> int | None:
        return self.scores.get(hole_number)

    def played_holes(self) -> list[int]:
        return sorted(self.scores)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def course_handicap(handicap_index: float, tee_box: TeeBox | None, par: int) -> int:
    slope = tee_box.slope if tee_box and tee_box.slope else DEFAULT_SLOPE
    rating = tee_box.rating if tee_box and tee_box.rating else par
    return _round_half_up(handicap_index * (slope / DEFAULT_SLOPE) + (rating - par))


def participant_for(
    player: Player,
    course: Course,
    scores: Mapping[int, int] | None = None,
    tee_name: str | None = None,
    resolved_handicap: int | None = None,
) -> Participant:
    tee = course.tee_box(tee_name)
    handicap = resolved_handicap
    if handicap is None:
        handicap = course_handicap(player.handicap_index, tee, course.par)
    return Participant(
        player=player,
        course_handicap=handicap,
        scores=dict(scores or {}),
        tee_box=tee,
    )


def validate_round(participants: Iterable[Participant], course: Course) -> list[Participant]:
    known_holes = course.hole_numbers
    seen: set[str] = set()
    checked: list[Participant] = []
    for participant in participants:
        if participant.player_id in seen:
            raise ScoringInputError(f"Participant {participant.player_id!r} appears more than once")
        seen.add(participant.player_id)
        if isinstance(participant.course_handicap, bool) or not isinstance(participant.course_handicap, int):
            raise ScoringInputError(
                f"Course handicap for {participant.player_id!r} must be an integer, "
                f"got {participant.course_handicap!r}"
            )
        for hole_number, gross in participant.scores.items():
            if hole_number not in known_holes:
                raise ScoringInputError(
                    f"Score for {participant.player_id!r} references hole {hole_number}, "
                    f"which is not on {course.name!r}"
                )
            if isinstance(gross, bool) or not isinstance(gross, int) or gross <= 0:
                raise ScoringInputError(
                    f"Gross strokes for {participant.player_id!r} on hole {hole_number} "
                    f"must be a positive integer, got {gross!r}"
                )
        checked.append(participant)
    return checked


def select_participants(participants: Iterable[Participant], player_ids: Iterable[str]) -> list[Participant]:
    wanted = set(player_ids)
    return [participant for participant in participants if participant.player_id in wanted]
