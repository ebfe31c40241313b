"""Birdie and eagle tracking computed from score snapshots.

New events are found by diffing a previous snapshot against the current one,
so callers never have to keep trackers between renders.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from moneygame.models import Course, Participant


class ScoreKind(str, Enum):
    BIRDIE = "birdie"
    EAGLE = "eagle"


@dataclass(frozen=True)
class ScoreCounts:
    player_id: str
    name: str
    birdies: int = 0
    eagles: int = 0


@dataclass(frozen=True)
class ScoringEvent:
    player_id: str
    name: str
    hole_number: int
    kind: ScoreKind
    total: int


@dataclass(frozen=True)
class StatLeaders:
    birdies: list[ScoreCounts]
    eagles: list[ScoreCounts]


def classify(gross: int, par: int) -> ScoreKind | None:
    diff = gross - par
    if diff == -1:
        return ScoreKind.BIRDIE
    if diff <= -2:
        return ScoreKind.EAGLE
    return None


def score_counts(participant: Participant, course: Course) -> ScoreCounts:
    birdies = eagles = 0
    for hole in course.holes:
        gross = participant.gross(hole.number)
        if gross is None:
            continue
        kind = classify(gross, hole.par)
        if kind is ScoreKind.BIRDIE:
            birdies += 1
        elif kind is ScoreKind.EAGLE:
            eagles += 1
    return ScoreCounts(participant.player_id, participant.name, birdies, eagles)


def stat_leaders(participants: Iterable[Participant], course: Course) -> StatLeaders:
    counts = [score_counts(participant, course) for participant in participants]
    return StatLeaders(
        birdies=sorted((c for c in counts if c.birdies > 0), key=lambda c: -c.birdies),
        eagles=sorted((c for c in counts if c.eagles > 0), key=lambda c: -c.eagles),
    )


def new_scoring_events(
    previous: Iterable[Participant],
    current: Iterable[Participant],
    course: Course,
) -> list[ScoringEvent]:
    previous_scores = {participant.player_id: participant.scores for participant in previous}
    events: list[ScoringEvent] = []
    for participant in current:
        before = previous_scores.get(participant.player_id, {})
        counts = score_counts(participant, course)
        for hole in course.holes:
            gross = participant.gross(hole.number)
            if gross is None or before.get(hole.number) == gross:
                continue
            kind = classify(gross, hole.par)
            if kind is None:
                continue
            total = counts.birdies if kind is ScoreKind.BIRDIE else counts.eagles
            events.append(ScoringEvent(participant.player_id, participant.name, hole.number, kind, total))
    return events
