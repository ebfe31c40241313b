#!/usr/bin/env python3
"""Print the leaderboard, skins and pool results for a round snapshot file."""

import argparse
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from moneygame.leaderboard import build_leaderboard
from moneygame.payouts import calculate_pool
from moneygame.schemas import PoolPayload, SkinsPayload
from moneygame.settings import load_settings
from moneygame.skins import calculate_skins, skins_ledger


def _signed(value: int) -> str:
    if value == 0:
        return "E"
    return f"+{value}" if value > 0 else str(value)


def print_leaderboard(course, participants) -> None:
    print("Leaderboard")
    for entry in build_leaderboard(participants, course):
        print(
            f"  {entry.display_position:>4} {entry.name:<20} "
            f"gross {entry.total_gross:>3}  net {entry.total_net:>3}  "
            f"to par {_signed(entry.to_par):>3}  thru {entry.thru}"
        )


def print_skins(course, participants, participant_ids, carryovers: bool) -> None:
    print("\nSkins")
    result = calculate_skins(participants, course, participant_ids, carryovers=carryovers)
    if result is None:
        print("  Not enough players in the skins game.")
        return
    names = {participant.player_id: participant.name for participant in participants}
    for outcome in result.hole_results:
        if outcome.winner_id:
            label = f"{names[outcome.winner_id]} wins {outcome.skin_value}"
        elif outcome.tied_player_ids:
            label = "tied (" + ", ".join(names[pid] for pid in outcome.tied_player_ids) + ")"
        else:
            label = outcome.status.value
        if outcome.ultimate_winner_id:
            label += f", carried to {names[outcome.ultimate_winner_id]}"
        print(f"  Hole {outcome.hole_number:>2}: {label}")
    ledger = skins_ledger(result, len(course.holes))
    print(f"  Pot {ledger.total_pot}, buy-in {ledger.buy_in:.2f}, remaining {ledger.remaining_pot}")
    for player_id, totals in result.player_totals.items():
        print(f"  {names[player_id]:<20} skins {totals.skins:>2}  net {ledger.net_by_player[player_id]:+d}")


def print_pool(course, participants, pool_ids, entry_fee) -> None:
    print("\nPool")
    result = calculate_pool(participants, course, pool_ids, entry_fee=entry_fee)
    if result is None:
        print("  Not enough players in the pool.")
        return
    print(f"  {len(result.entrants)} entrants, total pot ${result.total_pot:.2f}")
    for category, category_result in result.categories.items():
        print(f"  {category.value.title()} (${result.pot(category):.2f})")
        if category_result is None:
            print("    No result yet.")
            continue
        for payout in category_result.payouts:
            print(f"    {payout.place}. {payout.name:<20} net {payout.score:>3}  ${payout.amount:.2f}")
    for player_id, amount in result.winnings.items():
        print(f"  Total {player_id}: ${amount:.2f}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarize a round snapshot (JSON) for the money games.")
    parser.add_argument("snapshot", type=Path, help="Round snapshot JSON file.")
    parser.add_argument(
        "--no-carryovers",
        action="store_true",
        help="Kill tied skins instead of carrying them over.",
    )
    args = parser.parse_args()

    raw = json.loads(args.snapshot.read_text())
    skins_payload = SkinsPayload.model_validate(raw)
    pool_payload = PoolPayload.model_validate(raw)
    settings = load_settings()

    course, participants = skins_payload.to_domain()
    everyone = skins_payload.all_ids()
    carryovers = not args.no_carryovers and (
        skins_payload.carryovers if skins_payload.carryovers is not None else settings.skins_carryovers
    )

    print_leaderboard(course, participants)
    print_skins(
        course,
        participants,
        skins_payload.participant_ids if skins_payload.participant_ids is not None else everyone,
        carryovers,
    )
    print_pool(
        course,
        participants,
        pool_payload.pool_ids if pool_payload.pool_ids is not None else everyone,
        pool_payload.entry_fee if pool_payload.entry_fee is not None else settings.pool_entry_fee,
    )


if __name__ == "__main__":
    main()
