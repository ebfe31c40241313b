import logging
from collections.abc import Iterable
from decimal import Decimal

import psycopg

logger = logging.getLogger(__name__)

GAME_ENTRY_TYPES = {
    "skins": "SKINS_ENTRY",
    "pool": "POOL_ENTRY",
}
PAYOUT_EVENT_TYPE = "payout"
SKIN_EVENT_TYPE = "skin"
POOL_WINNINGS_DESCRIPTION = "Pool Winnings"

SCHEMA_STATEMENTS = (
    """
    create table if not exists money_events (
        id serial primary key,
        round_id text not null,
        player_id text not null,
        event_type text not null,
        amount numeric(10, 2) not null default 0,
        hole_number integer not null default 0,
        description text,
        created_at timestamptz not null default now()
    );
    """,
    """
    create index if not exists money_events_round_type_idx
    on money_events (round_id, event_type);
    """,
)


class UnknownGameError(ValueError):
    pass


def _entry_type(game: str) -> str:
    try:
        return GAME_ENTRY_TYPES[game]
    except KeyError:
        raise UnknownGameError(f"Unknown game {game!r}") from None


def ensure_schema(database_url: str) -> None:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)


def fetch_game_entries(database_url: str, round_id: str, game: str) -> list[str]:
    event_type = _entry_type(game)
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select player_id
                from money_events
                where round_id = %s and event_type = %s
                order by id;
                """,
                (round_id, event_type),
            )
            return [row[0] for row in cur.fetchall()]


def add_game_entry(database_url: str, round_id: str, player_id: str, game: str) -> bool:
    event_type = _entry_type(game)
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select id
                from money_events
                where round_id = %s and player_id = %s and event_type = %s
                limit 1;
                """,
                (round_id, player_id, event_type),
            )
            if cur.fetchone():
                return False
            cur.execute(
                """
                insert into money_events (round_id, player_id, event_type, amount, hole_number)
                values (%s, %s, %s, 0, 0);
                """,
                (round_id, player_id, event_type),
            )
    logger.info("Player %s joined %s for round %s", player_id, game, round_id)
    return True


def remove_game_entry(database_url: str, round_id: str, player_id: str, game: str) -> int:
    event_type = _entry_type(game)
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                delete from money_events
                where round_id = %s and player_id = %s and event_type = %s;
                """,
                (round_id, player_id, event_type),
            )
            deleted = cur.rowcount
    logger.info("Player %s left %s for round %s", player_id, game, round_id)
    return deleted


def save_round_payouts(
    database_url: str,
    round_id: str,
    entries: Iterable[tuple[str, Decimal]],
) -> int:
    """Replace the round's recorded winnings with ``entries``; zero amounts are skipped."""
    payouts = [(player_id, amount) for player_id, amount in entries if amount != 0]
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                delete from money_events
                where round_id = %s and event_type in (%s, %s);
                """,
                (round_id, SKIN_EVENT_TYPE, PAYOUT_EVENT_TYPE),
            )
            for player_id, amount in payouts:
                cur.execute(
                    """
                    insert into money_events (
                        round_id,
                        player_id,
                        event_type,
                        amount,
                        hole_number,
                        description
                    )
                    values (%s, %s, %s, %s, 0, %s);
                    """,
                    (round_id, player_id, PAYOUT_EVENT_TYPE, amount, POOL_WINNINGS_DESCRIPTION),
                )
    logger.info("Saved %d payout(s) for round %s", len(payouts), round_id)
    return len(payouts)


def fetch_round_payouts(database_url: str, round_id: str) -> list[dict]:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select player_id, amount, description, created_at
                from money_events
                where round_id = %s and event_type = %s
                order by id;
                """,
                (round_id, PAYOUT_EVENT_TYPE),
            )
            rows = cur.fetchall()
            return [
                {
                    "player_id": row[0],
                    "amount": row[1],
                    "description": row[2],
                    "created_at": row[3],
                }
                for row in rows
            ]
