import logging
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import TypeVar

from moneygame.models import (
    FRONT_NINE_LAST_HOLE,
    HOLES_PER_ROUND,
    Course,
    Participant,
    validate_round,
)
from moneygame.strokes import difficulty_order, whole_field_strokes

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Nine(str, Enum):
    FRONT = "front"
    BACK = "back"
    ALL = "all"

    def contains(self, hole_number: int) -> bool:
        if self is Nine.FRONT:
            return hole_number <= FRONT_NINE_LAST_HOLE
        if self is Nine.BACK:
            return hole_number > FRONT_NINE_LAST_HOLE
        return True


@dataclass(frozen=True)
class LeaderboardEntry:
    player_id: str
    name: str
    course_handicap: int
    total_gross: int
    front_gross: int
    back_gross: int
    strokes_received: int
    par_played: int
    thru: int
    tiebreak: tuple[int, ...]
    position: int = 0
    tied: bool = False

    @property
    def total_net(self) -> int:
        return self.total_gross - self.strokes_received

    @property
    def to_par(self) -> int:
        return self.total_gross - self.par_played

    @property
    def display_position(self) -> str:
        if self.thru == 0:
            return "-"
        return f"T{self.position}" if self.tied else str(self.position)

    @property
    def finished(self) -> bool:
        return self.thru >= HOLES_PER_ROUND


@dataclass(frozen=True)
class RoundProgress:
    active_players: int
    all_active_finished: bool
    all_players_finished: bool


def tiebreak_sequence(participant: Participant, course: Course, nine: Nine = Nine.ALL) -> tuple[int, ...]:
    """Gross scores on the played holes of ``nine``, hardest hole first."""
    return tuple(
        participant.scores[hole.number]
        for hole in difficulty_order(course.holes)
        if nine.contains(hole.number) and hole.number in participant.scores
    )


def ranking_key(net: int, tiebreak: tuple[int, ...]) -> tuple[int, tuple[int, ...]]:
    # Lower net first, then the first differing gross on the hardest holes.
    return (net, tiebreak)


def rank_groups(items: Iterable[T], key: Callable[[T], Hashable]) -> list[list[T]]:
    """Sort by ``key`` (stable) and group consecutive items that are fully tied."""
    groups: list[list[T]] = []
    last_key = None
    for item in sorted(items, key=key):
        item_key = key(item)
        if groups and item_key == last_key:
            groups[-1].append(item)
        else:
            groups.append([item])
        last_key = item_key
    return groups


def summarize(participant: Participant, course: Course) -> LeaderboardEntry:
    strokes = whole_field_strokes(participant.course_handicap, course.holes)
    total_gross = front_gross = back_gross = 0
    strokes_received = par_played = thru = 0
    for hole in course.holes:
        gross = participant.gross(hole.number)
        if gross is None:
            continue
        total_gross += gross
        if hole.is_front_nine:
            front_gross += gross
        else:
            back_gross += gross
        strokes_received += strokes.get(hole.number, 0)
        par_played += hole.par
        thru += 1
    return LeaderboardEntry(
        player_id=participant.player_id,
        name=participant.name,
        course_handicap=participant.course_handicap,
        total_gross=total_gross,
        front_gross=front_gross,
        back_gross=back_gross,
        strokes_received=strokes_received,
        par_played=par_played,
        thru=thru,
        tiebreak=tiebreak_sequence(participant, course),
    )


def _leaderboard_key(entry: LeaderboardEntry) -> tuple:
    return (entry.thru == 0, ranking_key(entry.total_net, entry.tiebreak))


def build_leaderboard(participants: Iterable[Participant], course: Course) -> list[LeaderboardEntry]:
    entries = [summarize(participant, course) for participant in validate_round(participants, course)]
    ranked: list[LeaderboardEntry] = []
    for group in rank_groups(entries, _leaderboard_key):
        position = len(ranked) + 1
        tied = len(group) > 1
        ranked.extend(replace(entry, position=position, tied=tied) for entry in group)
    logger.debug("Ranked %d participants on %s", len(ranked), course.name)
    return ranked


def round_progress(entries: list[LeaderboardEntry]) -> RoundProgress:
    active = [entry for entry in entries if entry.thru > 0]
    return RoundProgress(
        active_players=len(active),
        all_active_finished=bool(active) and all(entry.finished for entry in active),
        all_players_finished=bool(entries) and all(entry.finished for entry in entries),
    )
