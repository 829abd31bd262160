from unittest.mock import patch

from fastapi.testclient import TestClient

from tavern_tournaments.core.exceptions import PersistenceError
from tests.conftest import EVENT_ID, make_token

BASE = f"/api/events/{EVENT_ID}/tournament"


def add_players(client: TestClient, count: int):
    ids = []
    for i in range(1, count + 1):
        response = client.post(f"{BASE}/players", json={"player_name": f"Player {i}", "seed": i})
        assert response.status_code == 201, response.text
        ids.append(response.json()["id"])
    return ids


class TestTournamentRoutesSmoke:

    def test_root(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200

    def test_config_not_found(self, client: TestClient):
        response = client.get(BASE)
        assert response.status_code == 404

    def test_put_and_get_config(self, client: TestClient):
        response = client.put(BASE, json={"format": "round_robin", "tiebreaker": "buchholz"})
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["format"] == "round_robin"
        assert data["status"] == "setup"
        assert data["points_win"] == 3

        fetched = client.get(BASE).json()
        assert fetched["id"] == data["id"]
        assert fetched["tiebreaker"] == "buchholz"

    def test_put_config_rejects_unordered_points(self, client: TestClient):
        response = client.put(BASE, json={"points_win": 1, "points_draw": 2})
        assert response.status_code == 400

    def test_put_config_rejects_format_change_mid_tournament(self, client: TestClient):
        add_players(client, 2)
        client.post(f"{BASE}/bracket")
        response = client.put(BASE, json={"format": "swiss"})
        assert response.status_code == 400
        assert "in progress" in response.json()["detail"]

    def test_put_config_rejects_unknown_format(self, client: TestClient):
        response = client.put(BASE, json={"format": "ladder"})
        assert response.status_code == 422

    def test_players_crud(self, client: TestClient):
        ids = add_players(client, 2)
        listed = client.get(f"{BASE}/players").json()
        assert [p["player_name"] for p in listed] == ["Player 1", "Player 2"]

        duplicate = client.post(f"{BASE}/players", json={"player_name": "Player 1"})
        assert duplicate.status_code == 400

        assert client.delete(f"{BASE}/players/{ids[0]}").status_code == 204
        assert client.delete(f"{BASE}/players/{ids[0]}").status_code == 404
        assert len(client.get(f"{BASE}/players").json()) == 1

    def test_generate_bracket_and_report_results(self, client: TestClient):
        client.put(BASE, json={"format": "single_elimination", "seed_method": "manual"})
        ids = add_players(client, 4)

        response = client.post(f"{BASE}/bracket")
        assert response.status_code == 201, response.text
        matches = response.json()
        assert len(matches) == 3
        semi1 = matches[0]
        assert (semi1["player1_id"], semi1["player2_id"]) == (ids[0], ids[3])

        result = client.post(f"{BASE}/matches/{semi1['id']}/result",
                             json={"winner_id": ids[0], "player1_score": 2, "player2_score": 0})
        assert result.status_code == 200, result.text
        assert result.json()["status"] == "completed"

        final = client.get(f"{BASE}/matches").json()[-1]
        assert final["player1_id"] == ids[0]

        standings = client.get(f"{BASE}/standings").json()
        assert standings[0]["player_id"] == ids[0]
        eliminated = {entry["player_id"] for entry in standings if entry["is_eliminated"]}
        assert eliminated == {ids[3]}

    def test_generate_bracket_with_shuffle_seed(self, client: TestClient):
        add_players(client, 4)
        first = client.post(f"{BASE}/bracket", json={"shuffle_seed": 3}).json()
        second = client.post(f"{BASE}/bracket", json={"shuffle_seed": 3}).json()
        assert [(m["player1_id"], m["player2_id"]) for m in first] == [(m["player1_id"], m["player2_id"]) for m in second]

    def test_generate_bracket_needs_two_players(self, client: TestClient):
        add_players(client, 1)
        response = client.post(f"{BASE}/bracket")
        assert response.status_code == 400
        assert "At least 2 players" in response.json()["detail"]

    def test_double_elimination_is_not_implemented(self, client: TestClient):
        client.put(BASE, json={"format": "double_elimination"})
        add_players(client, 4)
        response = client.post(f"{BASE}/bracket")
        assert response.status_code == 501

    def test_invalid_winner_is_bad_request(self, client: TestClient):
        client.put(BASE, json={"seed_method": "manual"})
        add_players(client, 2)
        match = client.post(f"{BASE}/bracket").json()[0]
        response = client.post(f"{BASE}/matches/{match['id']}/result", json={"winner_id": "someone-else"})
        assert response.status_code == 400

    def test_unknown_match_is_not_found(self, client: TestClient):
        add_players(client, 2)
        client.post(f"{BASE}/bracket")
        response = client.post(f"{BASE}/matches/missing/result", json={"winner_id": "x"})
        assert response.status_code == 404

    def test_advance_round(self, client: TestClient):
        client.put(BASE, json={"format": "swiss", "max_rounds": 2, "seed_method": "manual"})
        add_players(client, 4)

        early = client.post(f"{BASE}/advance")
        assert early.status_code == 400

        for match in client.post(f"{BASE}/bracket").json():
            client.post(f"{BASE}/matches/{match['id']}/result", json={"winner_id": match["player1_id"]})
        response = client.post(f"{BASE}/advance")
        assert response.status_code == 200, response.text
        assert response.json()["current_round"] == 2
        assert len(client.get(f"{BASE}/matches").json()) == 4

    def test_reset_then_add_player_and_regenerate(self, client: TestClient):
        client.put(BASE, json={"seed_method": "manual"})
        add_players(client, 3)
        client.post(f"{BASE}/bracket")

        locked = client.post(f"{BASE}/players", json={"player_name": "Late"})
        assert locked.status_code == 400

        reset = client.post(f"{BASE}/reset")
        assert reset.status_code == 200, reset.text
        assert reset.json()["status"] == "setup"
        assert reset.json()["current_round"] == 0
        assert client.get(f"{BASE}/matches").json() == []

        late = client.post(f"{BASE}/players", json={"player_name": "Late", "seed": 4})
        assert late.status_code == 201, late.text
        matches = client.post(f"{BASE}/bracket").json()
        assert len(matches) == 3
        assert any(late.json()["id"] in (m["player1_id"], m["player2_id"]) for m in matches)

    def test_reset_unconfigured_event(self, client: TestClient):
        assert client.post(f"{BASE}/reset").status_code == 404

    def test_persistence_failure_is_server_error(self, client: TestClient):
        with patch("tavern_tournaments.services.tournament_service.generate_bracket",
                   side_effect=PersistenceError("Could not replace the bracket: disk full")):
            response = client.post(f"{BASE}/bracket")
        assert response.status_code == 500


class TestTournamentRoutesAuth:

    def test_writes_require_a_token(self, anonymous_client: TestClient):
        assert anonymous_client.put(BASE, json={}).status_code == 401
        assert anonymous_client.post(f"{BASE}/players", json={"player_name": "Ana"}).status_code == 401
        assert anonymous_client.post(f"{BASE}/bracket").status_code == 401
        assert anonymous_client.post(f"{BASE}/reset").status_code == 401

    def test_reads_are_public(self, anonymous_client: TestClient):
        assert anonymous_client.get(f"{BASE}/players").status_code == 200
        assert anonymous_client.get(f"{BASE}/matches").status_code == 200

    def test_bad_token_is_rejected(self, anonymous_client: TestClient):
        response = anonymous_client.put(BASE, json={}, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_valid_token_is_accepted(self, anonymous_client: TestClient):
        token = make_token()
        response = anonymous_client.put(BASE, json={"notes": "Saturday cup"},
                                        headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200, response.text
        assert response.json()["notes"] == "Saturday cup"
