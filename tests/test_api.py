from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import moneygame.main as main
from moneygame.settings import Settings

COURSE = {
    "name": "Simple",
    "holes": [{"number": n, "par": 4, "difficulty": n} for n in range(1, 19)],
    "tee_boxes": [{"name": "White", "rating": 70.5, "slope": 125}],
}


def _flat(value, **overrides):
    scores = {str(n): value for n in range(1, 19)}
    scores.update({key.lstrip("h"): gross for key, gross in overrides.items()})
    return scores


ROUND = {
    "course": COURSE,
    "participants": [
        {"player_id": "p1", "name": "Ann", "course_handicap": 0, "scores": _flat(4)},
        {"player_id": "p2", "name": "Bo", "course_handicap": 0, "scores": _flat(4, h1=5, h10=5)},
        {"player_id": "p3", "name": "Cy", "course_handicap": 0, "scores": _flat(4, h1=5, h2=5, h10=5, h11=5)},
        {"player_id": "p4", "name": "Di", "course_handicap": 0, "scores": _flat(5)},
    ],
}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(
        main,
        "settings",
        Settings(database_url="postgresql://test", scoring_pin="9999", pool_entry_fee=Decimal("5.00")),
    )
    return TestClient(main.app)


def test_leaderboard(client):
    response = client.post("/api/leaderboard", json=ROUND)
    assert response.status_code == 200
    body = response.json()
    assert [row["player_id"] for row in body["leaderboard"]] == ["p1", "p2", "p3", "p4"]
    assert body["leaderboard"][1]["net"] == 74
    assert body["leaderboard"][1]["to_par"] == 2
    assert body["leaderboard"][0]["position"] == "1"
    assert body["progress"] == {"active_players": 4, "all_active_finished": True, "all_players_finished": True}


def test_course_handicap_resolved_from_index(client):
    payload = {
        "course": COURSE,
        "participants": [
            {"player_id": "p1", "handicap_index": 10.0, "tee_box": "white", "scores": {"1": 5}},
        ],
    }
    response = client.post("/api/leaderboard", json=payload)
    # 10 * 125 / 113 + (70.5 - 72) = 9.56 -> 10
    assert response.json()["leaderboard"][0]["course_handicap"] == 10


def test_skins(client):
    payload = {**ROUND, "participant_ids": ["p1", "p2"], "carryovers": True}
    body = client.post("/api/skins", json=payload).json()
    assert body["status"] == "ok"
    result = body["result"]
    assert result["holes"][0]["winner_id"] == "p1"
    assert result["holes"][1]["tied_player_ids"] == ["p1", "p2"]
    assert result["holes"][9]["skin_value"] == 9
    assert result["players"]["p1"]["skins"] == 10
    assert "ledger" not in result
    assert body["ledger"]["total_pot"] == 18
    assert body["ledger"]["remaining_pot"] == 8
    assert result["carryover"] == 8


def test_skins_insufficient_data(client):
    body = client.post("/api/skins", json={**ROUND, "participant_ids": ["p1"]}).json()
    assert body == {"status": "insufficient_data", "result": None}


def test_pool(client):
    body = client.post("/api/pool", json=ROUND).json()
    assert body["status"] == "ok"
    result = body["result"]
    assert result["total_pot"] == 20.0
    assert result["pots"] == {"front": 8.0, "back": 8.0, "total": 4.0}
    assert [p["player_id"] for p in result["categories"]["front"]] == ["p1", "p2", "p3"]
    assert result["winnings"] == {"p1": 10.0, "p2": 6.0, "p3": 4.0}


def test_pool_uses_requested_fee_and_entrants(client):
    payload = {**ROUND, "pool_ids": ["p3", "p4"], "entry_fee": "10"}
    result = client.post("/api/pool", json=payload).json()["result"]
    assert result["total_pot"] == 20.0
    assert result["winnings"] == {"p3": 10.0, "p4": 6.0}


def test_highlights(client):
    payload = {
        "course": COURSE,
        "participants": [{"player_id": "p1", "name": "Ann", "scores": {"1": 3, "2": 2}}],
        "previous": [{"player_id": "p1", "scores": {"1": 3}}],
    }
    body = client.post("/api/highlights", json=payload).json()
    assert body["birdie_leaders"] == [{"player_id": "p1", "name": "Ann", "birdies": 1, "eagles": 1}]
    assert body["events"] == [{"player_id": "p1", "name": "Ann", "hole_number": 2, "kind": "eagle", "total": 1}]


def test_invalid_payload(client):
    response = client.post("/api/leaderboard", json={"participants": []})
    assert response.status_code == 422
    assert response.json()["error"] == "Invalid payload"


def test_unknown_hole_is_rejected(client):
    payload = {"course": COURSE, "participants": [{"player_id": "p1", "scores": {"19": 4}}]}
    response = client.post("/api/leaderboard", json=payload)
    assert response.status_code == 422
    assert "hole 19" in response.json()["error"]


def test_save_payouts_requires_pin(client, monkeypatch):
    monkeypatch.setattr(main, "save_round_payouts", lambda *_args: pytest.fail("should not save"))
    response = client.post("/api/rounds/r1/payouts", json={**ROUND, "pin": "0000"})
    assert response.status_code == 403


def test_save_payouts(client, monkeypatch):
    saved = {}

    def fake_save(database_url, round_id, entries):
        saved.update(url=database_url, round_id=round_id, entries=list(entries))
        return len(saved["entries"])

    monkeypatch.setattr(main, "save_round_payouts", fake_save)
    response = client.post("/api/rounds/r1/payouts", json={**ROUND, "pin": "9999"})
    assert response.status_code == 200
    assert response.json()["saved"] == 3
    assert saved["url"] == "postgresql://test"
    assert saved["entries"][0] == ("p1", Decimal("10.00"))


def test_round_payouts(client, monkeypatch):
    monkeypatch.setattr(
        main,
        "fetch_round_payouts",
        lambda *_args: [{"player_id": "p1", "amount": Decimal("10.00"), "description": "Pool Winnings"}],
    )
    body = client.get("/api/rounds/r1/payouts").json()
    assert body["payouts"] == [{"player_id": "p1", "amount": 10.0, "description": "Pool Winnings"}]


def test_game_entries(client, monkeypatch):
    monkeypatch.setattr(main, "fetch_game_entries", lambda *_args: ["p1", "p2"])
    monkeypatch.setattr(main, "add_game_entry", lambda *_args: True)
    monkeypatch.setattr(main, "remove_game_entry", lambda *_args: 1)

    assert client.get("/api/rounds/r1/games/skins").json()["player_ids"] == ["p1", "p2"]
    joined = client.post("/api/rounds/r1/games/pool", json={"player_id": "p3", "pin": "9999"})
    assert joined.json()["joined"] is True
    assert client.post("/api/rounds/r1/games/pool", json={"player_id": "p3", "pin": "1"}).status_code == 403
    left = client.delete("/api/rounds/r1/games/skins/p1", params={"pin": "9999"})
    assert left.json()["removed"] is True
    assert client.delete("/api/rounds/r1/games/skins/p1").status_code == 403


def test_unknown_game(client):
    assert client.get("/api/rounds/r1/games/nassau").status_code == 404
