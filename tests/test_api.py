from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from swipe_leaderboard.config import ranking
from swipe_leaderboard.errors import StoreError
from swipe_leaderboard.main import AVAILABLE_ENDPOINTS, create_app


def submit(client, username, level, picture=None):
    body = {"username": username, "level": level}
    if picture is not None:
        body["profilePicture"] = picture
    return client.post("/api/leaderboard/update", json=body)


def test_service_banner(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["message"] == "Swipe Leaderboard API is running!"
    assert body["endpoints"]["updateScore"] == "/api/leaderboard/update"
    assert body["timestamp"].endswith("Z")


def test_health_reports_connected_store(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["database"] == "connected"
    assert "timestamp" in body


def test_health_reports_disconnected_store(client, store):
    store.ping = AsyncMock(return_value=False)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "disconnected"


def test_update_new_player(client):
    response = submit(client, "alice", 10, "alice.png")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "newRecord": True,
        "message": "Welcome to top 20!",
        "data": {
            "username": "alice",
            "level": 10,
            "rank": 1,
            "isInTop20": True,
            "gamesPlayed": 1,
        },
    }


def test_update_new_personal_best(client):
    submit(client, "alice", 10)

    response = submit(client, "alice", 25)

    body = response.json()
    assert body["newRecord"] is True
    assert body["message"] == "New record in top 20!"
    assert body["data"] == {
        "username": "alice",
        "level": 25,
        "previousBest": 10,
        "newRank": 1,
        "isInTop20": True,
        "gamesPlayed": 2,
    }


def test_update_not_high_enough(client):
    submit(client, "alice", 10)

    response = submit(client, "alice", 5)

    body = response.json()
    assert body["success"] is True
    assert body["newRecord"] is False
    assert body["message"] == "Score not high enough for new record"
    assert body["data"] == {
        "username": "alice",
        "currentBest": 10,
        "submittedLevel": 5,
        "currentRank": 1,
        "isInTop20": True,
        "gamesPlayed": 2,
    }


def test_update_outside_top_tier_messages(client):
    for i in range(20):
        submit(client, f"pro{i}", 900 + i)

    welcome = submit(client, "rookie", 1).json()
    best = submit(client, "rookie", 2).json()

    assert welcome["message"] == "Welcome to the leaderboard!"
    assert welcome["data"]["isInTop20"] is False
    assert best["message"] == "New personal best!"
    assert best["data"]["newRank"] == 21


@pytest.mark.parametrize("body,error", [
    ({"level": 5}, "Username and level are required"),
    ({"username": "alice"}, "Username and level are required"),
    ({"username": "   ", "level": 5}, "Username and level are required"),
    ({"username": 42, "level": 5}, "Username and level are required"),
    ({"username": ["alice"], "level": 5}, "Username and level are required"),
    ({"username": "alice", "level": 0}, "Level must be a number between 1 and 1000"),
    ({"username": "alice", "level": 1001}, "Level must be a number between 1 and 1000"),
    ({"username": "alice", "level": "12"}, "Level must be a number between 1 and 1000"),
    ({"username": "alice", "level": 2.5}, "Level must be a number between 1 and 1000"),
])
def test_update_validation_errors(client, body, error):
    response = client.post("/api/leaderboard/update", json=body)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": error}


def test_update_malformed_body(client):
    response = client.post(
        "/api/leaderboard/update",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_update_rejects_oversized_body(client):
    response = client.post(
        "/api/leaderboard/update",
        json={"username": "alice", "level": 5, "profilePicture": "x" * (1024 * 1024 + 1)},
    )

    assert response.status_code == 413
    assert response.json() == {"success": False, "error": "Request body too large"}


def test_update_rejects_oversized_chunked_body(client):
    def chunks():
        yield b'{"username": "alice", "level": 5, "profilePicture": "'
        for _ in range(32):
            yield b"x" * 65536
        yield b'"}'

    response = client.post(
        "/api/leaderboard/update",
        content=chunks(),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 413
    assert response.json() == {"success": False, "error": "Request body too large"}
    assert client.get("/api/stats").json()["data"]["totalPlayers"] == 0


def test_update_accepts_small_chunked_body(client):
    def chunks():
        yield b'{"username": "alice", '
        yield b'"level": 5}'

    response = client.post(
        "/api/leaderboard/update",
        content=chunks(),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["username"] == "alice"
    assert response.json()["newRecord"] is True


def test_leaderboard_entries(client):
    submit(client, "alice", 10, "alice.png")
    submit(client, "bob", 30)
    submit(client, "carol", 20)

    response = client.get("/api/leaderboard")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["total"] == 3
    assert [e["username"] for e in body["data"]] == ["bob", "carol", "alice"]
    assert [e["rank"] for e in body["data"]] == [1, 2, 3]
    bob = body["data"][0]
    assert bob["level"] == 30
    assert bob["gamesPlayed"] == 1
    assert bob["avatar"] == ranking.DEFAULT_AVATAR
    assert bob["lastUpdated"].startswith("2024-01-01T")
    assert body["data"][2]["avatar"] == "alice.png"


@pytest.mark.parametrize("query,expected", [
    ("?limit=1000", 50),
    ("?limit=5", 5),
    ("?limit=abc", 20),
    ("?limit=12.5", 12),
    ("?limit=5abc", 5),
    ("", 20),
])
def test_leaderboard_limit(client, query, expected):
    for i in range(60):
        submit(client, f"p{i}", i + 1)

    body = client.get(f"/api/leaderboard{query}").json()

    assert len(body["data"]) == expected
    assert body["total"] == 60


def test_player_found(client):
    submit(client, "bob", 30)
    submit(client, "alice", 10, "alice.png")
    submit(client, "alice", 3)

    response = client.get("/api/player/alice")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "alice"
    assert data["level"] == 10
    assert data["rank"] == 2
    assert data["isInTop20"] is True
    assert data["profilePicture"] == "alice.png"
    assert data["gamesPlayed"] == 2
    assert data["joinedAt"] < data["lastPlayed"]


def test_player_not_found(client):
    response = client.get("/api/player/ghost")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {
            "username": "ghost",
            "level": 0,
            "rank": None,
            "isInTop20": False,
            "profilePicture": None,
            "gamesPlayed": 0,
            "message": "Player not found",
        },
    }


def test_stats_empty(client):
    response = client.get("/api/stats")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {
            "totalPlayers": 0,
            "highestLevel": 0,
            "topPlayer": None,
            "averageLevel": 0,
            "competitorsInTop20": 0,
        },
    }


def test_stats_populated(client):
    submit(client, "alice", 10)
    submit(client, "bob", 15)
    submit(client, "carol", 15)

    data = client.get("/api/stats").json()["data"]

    assert data == {
        "totalPlayers": 3,
        "highestLevel": 15,
        "topPlayer": "bob",
        "averageLevel": 13.3,
        "competitorsInTop20": 3,
    }


@pytest.mark.parametrize("method,path", [
    ("get", "/api/unknown"),
    ("get", "/api/leaderboard/update"),
    ("delete", "/api/stats"),
])
def test_unknown_endpoint(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "Endpoint not found",
        "availableEndpoints": AVAILABLE_ENDPOINTS,
    }


def test_leaderboard_store_failure(client, store):
    store.top_by_level_descending = AsyncMock(side_effect=StoreError("connection refused"))

    response = client.get("/api/leaderboard")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to fetch leaderboard",
        "message": "connection refused",
    }


def test_update_store_failure(client, store):
    store.upsert = AsyncMock(side_effect=StoreError("lock timeout"))

    response = submit(client, "alice", 5)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to update score",
        "message": "lock timeout",
    }


def test_player_store_failure_hides_message(client, store):
    store.find_by_identity = AsyncMock(side_effect=StoreError("secret dsn in message"))

    response = client.get("/api/player/alice")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to fetch player data"}


def test_stats_store_failure(client, store):
    store.count_all = AsyncMock(side_effect=StoreError("timeout"))

    response = client.get("/api/stats")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to fetch statistics"}


def test_unexpected_error_is_generic(store):
    store.count_all = AsyncMock(side_effect=RuntimeError("boom"))

    with TestClient(create_app(store), raise_server_exceptions=False) as client:
        response = client.get("/api/stats")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}


def test_app_starts_when_store_is_unreachable(store):
    store.initialize = AsyncMock(side_effect=StoreError("could not connect"))
    store.ping = AsyncMock(return_value=False)
    store.close = AsyncMock()

    with TestClient(create_app(store)) as client:
        response = client.get("/health")

    assert response.json()["database"] == "disconnected"
    store.close.assert_awaited_once()
