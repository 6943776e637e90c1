"""Player API 테스트"""

from fastapi.testclient import TestClient


def test_create_player(client: TestClient) -> None:
    response = client.post(
        "/player", json={"player_id": "p1", "age": 20, "name": "Aria", "deck": ["card_slash"]}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["player_id"] == "p1"
    assert data["level"] == 1
    assert data["max_hp"] == 100
    assert data["max_vitality"] == 150
    assert data["vitality_status"] == "Prime"
    assert data["current_quest_id"] is None


def test_create_duplicate(client: TestClient) -> None:
    client.post("/player", json={"player_id": "p1", "age": 20})
    response = client.post("/player", json={"player_id": "p1", "age": 20})
    assert response.status_code == 400


def test_create_invalid_age(client: TestClient) -> None:
    response = client.post("/player", json={"player_id": "p1", "age": 40})
    assert response.status_code == 422


def test_get_player(client: TestClient) -> None:
    client.post("/player", json={"player_id": "p1", "age": 20})
    response = client.get("/player/p1")
    assert response.status_code == 200
    assert response.json()["age"] == 20


def test_get_unknown_player(client: TestClient) -> None:
    assert client.get("/player/ghost").status_code == 404
