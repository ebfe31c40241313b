"""Skins game: lowest net on a hole wins its pot outright.

Holes are settled in hole-number order. A tie or an incomplete hole either
carries its unit into the next pot or kills it, depending on ``carryovers``.
When a carried pot is finally won, every hole it absorbed records the winner
as ``ultimate_winner_id``; their ``winner_id`` stays empty.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from moneygame.models import Course, Participant, select_participants, validate_round
from moneygame.strokes import AllocationMode, group_strokes

logger = logging.getLogger(__name__)

BASE_SKIN_VALUE = 1
MIN_PARTICIPANTS = 2


class HoleStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"


@dataclass
class HoleOutcome:
    hole_number: int
    status: HoleStatus
    winner_id: str | None = None
    skin_value: int = 0
    tied_player_ids: tuple[str, ...] = ()
    ultimate_winner_id: str | None = None
    net_scores: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PlayerSkins:
    skins: int = 0
    winnings: int = 0


@dataclass(frozen=True)
class SkinsResult:
    hole_results: list[HoleOutcome]
    player_totals: dict[str, PlayerSkins]
    player_strokes: dict[str, dict[int, int]]
    carryovers: bool
    carryover: int

    @property
    def participant_count(self) -> int:
        return len(self.player_totals)

    @property
    def awarded(self) -> int:
        return sum(totals.skins for totals in self.player_totals.values())


@dataclass(frozen=True)
class SkinsLedger:
    total_pot: int
    buy_in: float
    awarded: int
    remaining_pot: int
    net_by_player: dict[str, int]


def _lowest_nets(net_scores: dict[str, int]) -> list[str]:
    low = min(net_scores.values())
    return [player_id for player_id, net in net_scores.items() if net == low]


def calculate_skins(
    participants: Iterable[Participant],
    course: Course,
    participant_ids: Iterable[str],
    carryovers: bool = True,
) -> SkinsResult | None:
    players = select_participants(validate_round(participants, course), participant_ids)
    if len(players) < MIN_PARTICIPANTS:
        logger.debug("Skins skipped: %d active participant(s)", len(players))
        return None

    player_strokes = group_strokes(
        {player.player_id: player.course_handicap for player in players},
        course.holes,
        mode=AllocationMode.DIFFERENTIAL,
    )

    hole_results: list[HoleOutcome] = []
    carryover = 0
    pending: list[int] = []
    for hole in course.holes:
        net_scores: dict[str, int] = {}
        for player in players:
            gross = player.gross(hole.number)
            if gross is not None:
                net_scores[player.player_id] = gross - player_strokes[player.player_id][hole.number]
        pot = BASE_SKIN_VALUE + carryover
        outcome = HoleOutcome(hole_number=hole.number, status=HoleStatus.PENDING, net_scores=net_scores)

        if len(net_scores) < len(players):
            if carryovers:
                carryover += BASE_SKIN_VALUE
                pending.append(len(hole_results))
            else:
                carryover = 0
        else:
            outcome.status = HoleStatus.COMPLETED
            winners = _lowest_nets(net_scores)
            if len(winners) == 1:
                outcome.winner_id = winners[0]
                outcome.skin_value = pot
                for idx in pending:
                    hole_results[idx].ultimate_winner_id = outcome.winner_id
                pending = []
                carryover = 0
            else:
                outcome.tied_player_ids = tuple(winners)
                if carryovers:
                    carryover += BASE_SKIN_VALUE
                    pending.append(len(hole_results))
                else:
                    carryover = 0
        hole_results.append(outcome)

    skins = {player.player_id: 0 for player in players}
    for outcome in hole_results:
        if outcome.winner_id is not None:
            skins[outcome.winner_id] += outcome.skin_value
    player_totals = {
        player_id: PlayerSkins(skins=count, winnings=count)
        for player_id, count in skins.items()
    }
    return SkinsResult(
        hole_results=hole_results,
        player_totals=player_totals,
        player_strokes=player_strokes,
        carryovers=carryovers,
        carryover=carryover,
    )


def skins_ledger(result: SkinsResult, hole_count: int) -> SkinsLedger:
    awarded = result.awarded
    # With carryovers every hole stays in play; otherwise dead pots never count.
    total_pot = hole_count if result.carryovers else awarded
    count = result.participant_count
    return SkinsLedger(
        total_pot=total_pot,
        buy_in=total_pot / count if count else 0.0,
        awarded=awarded,
        remaining_pot=total_pot - awarded,
        net_by_player={
            player_id: totals.skins * count - awarded
            for player_id, totals in result.player_totals.items()
        },
    )
