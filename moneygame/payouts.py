import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from enum import Enum

from moneygame.leaderboard import Nine, rank_groups, ranking_key, tiebreak_sequence
from moneygame.models import Course, Participant, select_participants, validate_round
from moneygame.strokes import whole_field_strokes

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_FEE = Decimal("5.00")
PLACE_PERCENTAGES = (Decimal("0.5"), Decimal("0.3"), Decimal("0.2"))
MIN_ENTRANTS = 2
CENT = Decimal("0.01")


class PrizeCategory(str, Enum):
    FRONT = "front"
    BACK = "back"
    TOTAL = "total"

    @property
    def share(self) -> Decimal:
        return _CATEGORY_SHARES[self]

    @property
    def nine(self) -> Nine:
        return _CATEGORY_NINES[self]


_CATEGORY_SHARES = {
    PrizeCategory.FRONT: Decimal("0.40"),
    PrizeCategory.BACK: Decimal("0.40"),
    PrizeCategory.TOTAL: Decimal("0.20"),
}
_CATEGORY_NINES = {
    PrizeCategory.FRONT: Nine.FRONT,
    PrizeCategory.BACK: Nine.BACK,
    PrizeCategory.TOTAL: Nine.ALL,
}


@dataclass(frozen=True)
class PoolEntry:
    player_id: str
    name: str
    course_handicap: int
    front_hcp: int
    back_hcp: int
    front_gross: int
    back_gross: int
    front_played: int
    back_played: int
    tiebreaks: dict[PrizeCategory, tuple[int, ...]]

    def gross(self, category: PrizeCategory) -> int:
        if category is PrizeCategory.FRONT:
            return self.front_gross
        if category is PrizeCategory.BACK:
            return self.back_gross
        return self.front_gross + self.back_gross

    def strokes(self, category: PrizeCategory) -> int:
        if category is PrizeCategory.FRONT:
            return self.front_hcp
        if category is PrizeCategory.BACK:
            return self.back_hcp
        return self.front_hcp + self.back_hcp

    def net(self, category: PrizeCategory) -> int:
        return self.gross(category) - self.strokes(category)

    def played(self, category: PrizeCategory) -> int:
        if category is PrizeCategory.FRONT:
            return self.front_played
        if category is PrizeCategory.BACK:
            return self.back_played
        return self.front_played + self.back_played


@dataclass(frozen=True)
class Payout:
    category: PrizeCategory
    player_id: str
    name: str
    place: int
    amount: Decimal
    score: int
    gross: int


@dataclass(frozen=True)
class CategoryResult:
    category: PrizeCategory
    pot: Decimal
    payouts: tuple[Payout, ...]

    @property
    def awarded(self) -> Decimal:
        return sum((payout.amount for payout in self.payouts), Decimal("0"))


@dataclass(frozen=True)
class PoolResult:
    entry_fee: Decimal
    entrants: tuple[PoolEntry, ...]
    total_pot: Decimal
    categories: dict[PrizeCategory, CategoryResult | None]
    winnings: dict[str, Decimal]

    def pot(self, category: PrizeCategory) -> Decimal:
        return _cents(self.total_pot * category.share)

    def ledger_entries(self) -> list[tuple[str, Decimal]]:
        return [(player_id, amount) for player_id, amount in self.winnings.items() if amount != 0]


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_DOWN)


def nine_handicaps(course_handicap: int, course: Course) -> tuple[int, int]:
    """Split a course handicap into (front, back) strokes.

    Without hole data the handicap is halved, front rounded up. ``calculate_pool``
    never reaches that branch since a hole-less course accepts no scores; it
    serves callers that only need the split.
    """
    if not course.holes:
        total = max(0, course_handicap)
        front = (total + 1) // 2
        return front, total - front
    strokes = whole_field_strokes(course_handicap, course.holes)
    front = sum(count for number, count in strokes.items() if Nine.FRONT.contains(number))
    back = sum(count for number, count in strokes.items() if Nine.BACK.contains(number))
    return front, back


def pool_entry(participant: Participant, course: Course) -> PoolEntry:
    front_hcp, back_hcp = nine_handicaps(participant.course_handicap, course)
    front_gross = back_gross = front_played = back_played = 0
    for hole_number, gross in participant.scores.items():
        if Nine.FRONT.contains(hole_number):
            front_gross += gross
            front_played += 1
        else:
            back_gross += gross
            back_played += 1
    return PoolEntry(
        player_id=participant.player_id,
        name=participant.name,
        course_handicap=participant.course_handicap,
        front_hcp=front_hcp,
        back_hcp=back_hcp,
        front_gross=front_gross,
        back_gross=back_gross,
        front_played=front_played,
        back_played=back_played,
        tiebreaks={
            category: tiebreak_sequence(participant, course, category.nine)
            for category in PrizeCategory
        },
    )


def split_category(
    entries: Iterable[PoolEntry],
    category: PrizeCategory,
    pot: Decimal,
) -> CategoryResult | None:
    eligible = [entry for entry in entries if entry.played(category) > 0]
    if len(eligible) < MIN_ENTRANTS:
        logger.debug("No %s payout: %d eligible entrant(s)", category.value, len(eligible))
        return None

    payouts: list[Payout] = []
    slot = 0
    groups = rank_groups(eligible, lambda entry: ranking_key(entry.net(category), entry.tiebreaks[category]))
    for group in groups:
        if slot >= len(PLACE_PERCENTAGES):
            break
        combined = sum(PLACE_PERCENTAGES[slot:slot + len(group)], Decimal("0"))
        amount = _cents(pot * combined / len(group))
        if amount > 0:
            payouts.extend(
                Payout(
                    category=category,
                    player_id=entry.player_id,
                    name=entry.name,
                    place=slot + 1,
                    amount=amount,
                    score=entry.net(category),
                    gross=entry.gross(category),
                )
                for entry in group
            )
        slot += len(group)
    return CategoryResult(category=category, pot=pot, payouts=tuple(payouts))


def calculate_pool(
    participants: Iterable[Participant],
    course: Course,
    pool_ids: Iterable[str],
    entry_fee: Decimal = DEFAULT_ENTRY_FEE,
) -> PoolResult | None:
    players = select_participants(validate_round(participants, course), pool_ids)
    if len(players) < MIN_ENTRANTS:
        logger.debug("Pool skipped: %d entrant(s)", len(players))
        return None

    entrants = tuple(pool_entry(player, course) for player in players)
    total_pot = entry_fee * len(entrants)
    categories: dict[PrizeCategory, CategoryResult | None] = {}
    winnings: dict[str, Decimal] = {}
    for category in PrizeCategory:
        result = split_category(entrants, category, _cents(total_pot * category.share))
        categories[category] = result
        if result is None:
            continue
        for payout in result.payouts:
            winnings[payout.player_id] = winnings.get(payout.player_id, Decimal("0")) + payout.amount
    return PoolResult(
        entry_fee=entry_fee,
        entrants=entrants,
        total_pot=total_pot,
        categories=categories,
        winnings=winnings,
    )
