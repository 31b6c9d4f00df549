import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="module")
def client():
    from rollengine.main import app

    with TestClient(app) as test_client:
        yield test_client


def create_player(client: TestClient, player_id: int, gems: int = 1000) -> dict:
    response = client.post("/api/players/", json={"id": player_id, "balances": {"GEMS": gems}})
    assert response.status_code == 200
    return response.json()["data"]


def test_healthz(client):
    assert client.get("/").json() == "OK"


def test_create_player_twice_conflicts(client):
    player = create_player(client, 1001)
    assert player["balances"] == {"GEMS": 1000}

    response = client.post("/api/players/", json={"id": 1001})
    assert response.status_code == 409
    assert response.json()["status"] == "error"


def test_roll_then_rate_limited(client):
    create_player(client, 1002)

    first = client.post("/api/rolls", json={"player_id": 1002, "roll_type": "PREMIUM"})
    assert first.status_code == 200
    body = first.json()["data"]
    assert body["success"] is True
    assert body["data"]["total_cards"] == 1
    assert body["data"]["roll_cost"]["amount"] == 160

    pity_before = client.get("/api/players/1002/pity").json()["data"]

    second = client.post("/api/rolls", json={"player_id": 1002, "roll_type": "PREMIUM"})
    assert second.status_code == 429
    assert client.get("/api/players/1002/pity").json()["data"] == pity_before

    player = client.get("/api/players/1002").json()["data"]
    assert player["balances"] == {"GEMS": 840}
    assert player["owned_cards"] == 1


def test_roll_failures_map_to_status_codes(client):
    create_player(client, 1003, gems=100)

    missing = client.post("/api/rolls", json={"player_id": 999_999, "roll_type": "PREMIUM"})
    too_many = client.post(
        "/api/rolls", json={"player_id": 1003, "roll_type": "PREMIUM", "count": 11}
    )
    broke = client.post("/api/rolls", json={"player_id": 1003, "roll_type": "PREMIUM"})
    malformed = client.post("/api/rolls", json={"player_id": 1003})

    assert missing.status_code == 404
    assert too_many.status_code == 400
    assert broke.status_code == 400
    assert "funds" in broke.json()["message"].lower()
    assert malformed.status_code == 422


def test_pity_and_statistics(client):
    create_player(client, 1004)

    pity = client.get("/api/players/1004/pity").json()["data"]
    assert [tier["tier"] for tier in pity["tiers"]] == [
        "ULTIMATE",
        "MYTHICAL",
        "LEGENDARY",
        "EPIC",
        "RARE",
        "UNCOMMON",
        "COMMON",
    ]
    assert all(tier["pity_count"] == 0 for tier in pity["tiers"])

    client.post("/api/rolls", json={"player_id": 1004, "roll_type": "PREMIUM", "count": 5})
    stats = client.get("/api/players/1004/statistics").json()["data"]
    assert stats["total_rolls"] == 1
    assert stats["total_cards"] == 5

    assert client.get("/api/players/404404/pity").status_code == 404


def test_currency_grant_and_cost_quote(client):
    create_player(client, 1005, gems=0)

    granted = client.post(
        "/api/players/1005/currency/increase",
        json={"currency": "GEMS", "amount": 1600, "reason": "launch gift"},
    )
    assert granted.status_code == 200
    assert granted.json()["data"]["balances"] == {"GEMS": 1600}

    quote = client.get("/api/cost", params={"roll_type": "PREMIUM", "count": 10}).json()["data"]
    assert quote == {
        "currency": "GEMS",
        "amount": 1440,
        "original_amount": 1600,
        "discount": 0.1,
    }
    assert client.get("/api/cost", params={"roll_type": "DAILY", "count": 2}).status_code == 400
