from decimal import Decimal

import pytest

from moneygame import db


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=()):
        self.conn.executed.append((" ".join(query.split()), params))
        self.rowcount = self.conn.rowcount

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None

    def fetchall(self):
        return list(self.conn.rows)


class FakeConnection:
    def __init__(self, rows=None, rowcount=0):
        self.rows = rows or []
        self.rowcount = rowcount
        self.executed = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def cursor(self):
        return FakeCursor(self)


@pytest.fixture
def fake_db(monkeypatch):
    conn = FakeConnection()
    monkeypatch.setattr(db.psycopg, "connect", lambda _url: conn)
    return conn


def test_ensure_schema_runs_every_statement(fake_db):
    db.ensure_schema("postgresql://test")
    assert len(fake_db.executed) == len(db.SCHEMA_STATEMENTS)
    assert "create table if not exists money_events" in fake_db.executed[0][0]


def test_save_round_payouts_replaces_and_skips_zero(fake_db):
    saved = db.save_round_payouts(
        "postgresql://test",
        "round-1",
        [("p1", Decimal("10.00")), ("p2", Decimal("0")), ("p3", Decimal("4.00"))],
    )
    assert saved == 2
    delete, *inserts = fake_db.executed
    assert delete[0].startswith("delete from money_events")
    assert delete[1] == ("round-1", "skin", "payout")
    assert [params for _sql, params in inserts] == [
        ("round-1", "p1", "payout", Decimal("10.00"), "Pool Winnings"),
        ("round-1", "p3", "payout", Decimal("4.00"), "Pool Winnings"),
    ]


def test_add_game_entry_is_idempotent(fake_db):
    fake_db.rows = [(7,)]
    assert db.add_game_entry("postgresql://test", "round-1", "p1", "skins") is False
    assert len(fake_db.executed) == 1

    fake_db.rows = []
    fake_db.executed.clear()
    assert db.add_game_entry("postgresql://test", "round-1", "p1", "pool") is True
    assert fake_db.executed[-1][1] == ("round-1", "p1", "POOL_ENTRY")


def test_remove_game_entry_reports_deleted_rows(monkeypatch):
    conn = FakeConnection(rowcount=1)
    monkeypatch.setattr(db.psycopg, "connect", lambda _url: conn)
    assert db.remove_game_entry("postgresql://test", "round-1", "p1", "skins") == 1
    assert conn.executed[0][1] == ("round-1", "p1", "SKINS_ENTRY")


def test_fetch_game_entries(fake_db):
    fake_db.rows = [("p1",), ("p2",)]
    assert db.fetch_game_entries("postgresql://test", "round-1", "skins") == ["p1", "p2"]


def test_fetch_round_payouts(fake_db):
    fake_db.rows = [("p1", Decimal("6.00"), "Pool Winnings", None)]
    rows = db.fetch_round_payouts("postgresql://test", "round-1")
    assert rows == [
        {"player_id": "p1", "amount": Decimal("6.00"), "description": "Pool Winnings", "created_at": None}
    ]


def test_unknown_game_rejected(fake_db):
    with pytest.raises(db.UnknownGameError):
        db.fetch_game_entries("postgresql://test", "round-1", "nassau")
    assert fake_db.executed == []
