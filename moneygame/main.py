import logging
from typing import TypeVar

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from moneygame.db import (
    GAME_ENTRY_TYPES,
    add_game_entry,
    ensure_schema,
    fetch_game_entries,
    fetch_round_payouts,
    remove_game_entry,
    save_round_payouts,
)
from moneygame.highlights import ScoreCounts, new_scoring_events, stat_leaders
from moneygame.leaderboard import LeaderboardEntry, build_leaderboard, round_progress
from moneygame.models import ScoringInputError
from moneygame.payouts import CategoryResult, PoolResult, calculate_pool
from moneygame.schemas import (
    GameEntryPayload,
    HighlightsPayload,
    PoolPayload,
    RoundPayload,
    SavePayoutsPayload,
    SkinsPayload,
)
from moneygame.settings import load_settings
from moneygame.skins import SkinsLedger, SkinsResult, calculate_skins, skins_ledger

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)
INSUFFICIENT_DATA = "insufficient_data"

app = FastAPI(title="Money Game Scoring")
settings = load_settings()


class PayloadError(Exception):
    def __init__(self, response: JSONResponse):
        super().__init__("invalid payload")
        self.response = response


@app.on_event("startup")
def startup() -> None:
    ensure_schema(settings.database_url)


@app.exception_handler(PayloadError)
async def payload_error_handler(request: Request, exc: PayloadError) -> JSONResponse:
    return exc.response


@app.exception_handler(ScoringInputError)
async def scoring_input_error_handler(request: Request, exc: ScoringInputError) -> JSONResponse:
    logger.warning("Rejected %s: %s", request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=422)


async def _read_payload(request: Request, model: type[PayloadT]) -> PayloadT:
    try:
        return model.model_validate(await request.json())
    except ValidationError as exc:
        details = exc.errors(include_url=False, include_context=False)
        raise PayloadError(
            JSONResponse({"error": "Invalid payload", "details": details}, status_code=422)
        ) from exc
    except ValueError as exc:
        raise PayloadError(JSONResponse({"error": "Invalid JSON body"}, status_code=422)) from exc


def _check_game(game: str) -> None:
    if game not in GAME_ENTRY_TYPES:
        raise HTTPException(status_code=404, detail=f"Unknown game {game!r}")


def _leaderboard_row(entry: LeaderboardEntry) -> dict:
    return {
        "position": entry.display_position,
        "player_id": entry.player_id,
        "name": entry.name,
        "course_handicap": entry.course_handicap,
        "gross": entry.total_gross,
        "front_nine": entry.front_gross,
        "back_nine": entry.back_gross,
        "strokes_received": entry.strokes_received,
        "net": entry.total_net,
        "to_par": entry.to_par,
        "thru": entry.thru,
        "tied": entry.tied,
    }


def _skins_body(result: SkinsResult, ledger: SkinsLedger) -> dict:
    return {
        "carryovers": result.carryovers,
        "carryover": result.carryover,
        "holes": [
            {
                "hole_number": outcome.hole_number,
                "status": outcome.status.value,
                "winner_id": outcome.winner_id,
                "skin_value": outcome.skin_value,
                "tied_player_ids": list(outcome.tied_player_ids),
                "ultimate_winner_id": outcome.ultimate_winner_id,
                "net_scores": outcome.net_scores,
            }
            for outcome in result.hole_results
        ],
        "players": {
            player_id: {
                "skins": totals.skins,
                "winnings": totals.winnings,
                "net": ledger.net_by_player[player_id],
                "strokes": result.player_strokes[player_id],
            }
            for player_id, totals in result.player_totals.items()
        },
    }


def _ledger_body(ledger: SkinsLedger) -> dict:
    return {
        "total_pot": ledger.total_pot,
        "buy_in": ledger.buy_in,
        "awarded": ledger.awarded,
        "remaining_pot": ledger.remaining_pot,
    }


def _category_body(result: CategoryResult | None) -> list[dict] | None:
    if result is None:
        return None
    return [
        {
            "player_id": payout.player_id,
            "name": payout.name,
            "place": payout.place,
            "amount": float(payout.amount),
            "score": payout.score,
            "gross": payout.gross,
        }
        for payout in result.payouts
    ]


def _pool_body(result: PoolResult) -> dict:
    return {
        "entry_fee": float(result.entry_fee),
        "entrants": [entry.player_id for entry in result.entrants],
        "total_pot": float(result.total_pot),
        "pots": {category.value: float(result.pot(category)) for category in result.categories},
        "categories": {
            category.value: _category_body(category_result)
            for category, category_result in result.categories.items()
        },
        "winnings": {player_id: float(amount) for player_id, amount in result.winnings.items()},
    }


def _counts_body(counts: list[ScoreCounts]) -> list[dict]:
    return [
        {"player_id": c.player_id, "name": c.name, "birdies": c.birdies, "eagles": c.eagles}
        for c in counts
    ]


def _pool_for(payload: PoolPayload) -> PoolResult | None:
    course, participants = payload.to_domain()
    pool_ids = payload.pool_ids if payload.pool_ids is not None else payload.all_ids()
    entry_fee = payload.entry_fee if payload.entry_fee is not None else settings.pool_entry_fee
    return calculate_pool(participants, course, pool_ids, entry_fee=entry_fee)


@app.post("/api/leaderboard")
async def api_leaderboard(request: Request):
    payload = await _read_payload(request, RoundPayload)
    course, participants = payload.to_domain()
    entries = build_leaderboard(participants, course)
    progress = round_progress(entries)
    return {
        "leaderboard": [_leaderboard_row(entry) for entry in entries],
        "progress": {
            "active_players": progress.active_players,
            "all_active_finished": progress.all_active_finished,
            "all_players_finished": progress.all_players_finished,
        },
    }


@app.post("/api/skins")
async def api_skins(request: Request):
    payload = await _read_payload(request, SkinsPayload)
    course, participants = payload.to_domain()
    participant_ids = payload.participant_ids if payload.participant_ids is not None else payload.all_ids()
    carryovers = payload.carryovers if payload.carryovers is not None else settings.skins_carryovers
    result = calculate_skins(participants, course, participant_ids, carryovers=carryovers)
    if result is None:
        return {"status": INSUFFICIENT_DATA, "result": None}
    ledger = skins_ledger(result, len(course.holes))
    return {"status": "ok", "result": _skins_body(result, ledger), "ledger": _ledger_body(ledger)}


@app.post("/api/pool")
async def api_pool(request: Request):
    payload = await _read_payload(request, PoolPayload)
    result = _pool_for(payload)
    if result is None:
        return {"status": INSUFFICIENT_DATA, "result": None}
    return {"status": "ok", "result": _pool_body(result)}


@app.post("/api/highlights")
async def api_highlights(request: Request):
    payload = await _read_payload(request, HighlightsPayload)
    course, participants = payload.to_domain()
    previous = [entry.to_participant(course) for entry in payload.previous]
    leaders = stat_leaders(participants, course)
    events = new_scoring_events(previous, participants, course)
    return {
        "birdie_leaders": _counts_body(leaders.birdies),
        "eagle_leaders": _counts_body(leaders.eagles),
        "events": [
            {
                "player_id": event.player_id,
                "name": event.name,
                "hole_number": event.hole_number,
                "kind": event.kind.value,
                "total": event.total,
            }
            for event in events
        ],
    }


@app.post("/api/rounds/{round_id}/payouts")
async def api_save_payouts(round_id: str, request: Request):
    payload = await _read_payload(request, SavePayoutsPayload)
    if payload.pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)
    result = _pool_for(payload)
    entries = result.ledger_entries() if result else []
    saved = save_round_payouts(settings.database_url, round_id, entries)
    return {
        "round_id": round_id,
        "saved": saved,
        "payouts": [{"player_id": player_id, "amount": float(amount)} for player_id, amount in entries],
    }


@app.get("/api/rounds/{round_id}/payouts")
async def api_round_payouts(round_id: str):
    rows = fetch_round_payouts(settings.database_url, round_id)
    return {
        "round_id": round_id,
        "payouts": [
            {"player_id": row["player_id"], "amount": float(row["amount"]), "description": row["description"]}
            for row in rows
        ],
    }


@app.get("/api/rounds/{round_id}/games/{game}")
async def api_game_entries(round_id: str, game: str):
    _check_game(game)
    return {
        "round_id": round_id,
        "game": game,
        "player_ids": fetch_game_entries(settings.database_url, round_id, game),
    }


@app.post("/api/rounds/{round_id}/games/{game}")
async def api_join_game(round_id: str, game: str, request: Request):
    _check_game(game)
    payload = await _read_payload(request, GameEntryPayload)
    if payload.pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)
    joined = add_game_entry(settings.database_url, round_id, payload.player_id, game)
    return {"round_id": round_id, "game": game, "player_id": payload.player_id, "joined": joined}


@app.delete("/api/rounds/{round_id}/games/{game}/{player_id}")
async def api_leave_game(round_id: str, game: str, player_id: str, pin: str = ""):
    _check_game(game)
    if pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)
    removed = remove_game_entry(settings.database_url, round_id, player_id, game)
    return {"round_id": round_id, "game": game, "player_id": player_id, "removed": removed > 0}
