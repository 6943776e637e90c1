"""Quest API 테스트 (번들 시나리오 1001_goblin_forest)"""

from fastapi.testclient import TestClient

GOBLIN = "1001_goblin_forest"


def _create_player(client: TestClient) -> None:
    client.post("/player", json={"player_id": "p1", "age": 20, "deck": ["card_slash"]})


def _start(client: TestClient):
    return client.post("/quest/start", json={"player_id": "p1", "scenario_id": GOBLIN})


class TestScenarios:
    def test_list_bundled(self, client: TestClient) -> None:
        response = client.get("/quest/scenarios")
        assert response.status_code == 200
        ids = [s["scenario_id"] for s in response.json()]
        assert ids == [GOBLIN, "1002_old_bridge"]

    def test_import_reports_dangling(self, client: TestClient) -> None:
        csv_text = "row_type,node_id,text_label,next_node,params\nNODE,a,Hi,b,\n"
        response = client.post(
            "/quest/scenarios", json={"scenario_id": "broken", "csv_text": csv_text}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["entry_id"] == "a"
        assert data["dangling"] == ["a -> b"]

    def test_import_missing_header(self, client: TestClient) -> None:
        response = client.post(
            "/quest/scenarios", json={"scenario_id": "bad", "csv_text": "foo,bar\n1,2\n"}
        )
        assert response.status_code == 400


class TestQuestFlow:
    def test_start(self, client: TestClient) -> None:
        _create_player(client)
        response = _start(client)
        assert response.status_code == 200
        data = response.json()
        assert data["phase"] == "awaiting_choice"
        assert data["node"]["node_id"] == "start"
        assert data["node"]["bg_key"] == "village_square"
        assert len(data["choices"]) == 2
        assert data["player"]["current_quest_id"] == GOBLIN

    def test_start_locked(self, client: TestClient) -> None:
        _create_player(client)
        _start(client)
        assert _start(client).status_code == 409

    def test_start_unknown_player(self, client: TestClient) -> None:
        assert _start(client).status_code == 404

    def test_no_active_quest(self, client: TestClient) -> None:
        _create_player(client)
        assert client.get("/quest/p1").status_code == 404

    def test_choice_rejected(self, client: TestClient) -> None:
        _create_player(client)
        _start(client)
        client.post("/quest/choose", json={"player_id": "p1", "choice_index": 0})

        current = client.get("/quest/p1").json()
        assert current["node"]["node_id"] == "den"
        trap = current["choices"][2]
        assert trap["available"] is False
        assert trap["reason"] == "insufficient_gold"

        response = client.post("/quest/choose", json={"player_id": "p1", "choice_index": 2})
        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "insufficient_gold"

    def test_choice_out_of_range(self, client: TestClient) -> None:
        _create_player(client)
        _start(client)
        response = client.post("/quest/choose", json={"player_id": "p1", "choice_index": 9})
        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "not_found"

    def test_battle_to_completion(self, client: TestClient) -> None:
        _create_player(client)
        _start(client)
        step = client.post("/quest/choose", json={"player_id": "p1", "choice_index": 0}).json()
        assert step["joined_guests"] == ["mercenary_garo"]

        step = client.post("/quest/choose", json={"player_id": "p1", "choice_index": 0}).json()
        assert step["phase"] == "in_battle"
        assert step["enemy_group_id"] == "goblin_chief"

        response = client.post("/quest/battle-result", json={"player_id": "p1", "won": True})
        assert response.status_code == 200
        data = response.json()
        assert data["finished"] is True
        assert data["result"] == "success"
        assert data["completion"]["earned_exp"] == 70
        assert data["completion"]["gold_gained"] == 120
        assert data["player"]["gold"] == 120
        assert data["player"]["current_quest_id"] is None

    def test_battle_result_without_battle(self, client: TestClient) -> None:
        _create_player(client)
        _start(client)
        response = client.post("/quest/battle-result", json={"player_id": "p1", "won": True})
        assert response.status_code == 409

    def test_give_up(self, client: TestClient) -> None:
        _create_player(client)
        _start(client)
        response = client.post("/quest/give-up", json={"player_id": "p1"})
        assert response.status_code == 200
        data = response.json()
        assert data["result"] == "failure"
        assert data["completion"]["days_passed"] == 2
        assert client.get("/quest/p1").status_code == 404
