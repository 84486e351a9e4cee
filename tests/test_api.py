"""Tests for the FastAPI tic-tac-toe interface."""

from __future__ import annotations

import time

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from xoarena import ui
from xoarena.ai import select_ai_move
from xoarena.ui import app


client = TestClient(app)
ui.AI_THINK_DELAY = (0.0, 0.0)


def _play(game_id, cell):
    return client.post(f"/api/game/{game_id}/move", json={"cellIndex": cell})


def test_create_pvp_game():
    response = client.post("/api/game", json={"mode": "pvp"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["mode"] == "pvp"
    assert payload["currentPlayer"] == "X"
    assert payload["board"] == [""] * 9
    assert payload["scores"] == {"X": 0, "O": 0, "draws": 0}
    assert payload["moveLog"] == []
    assert payload["lastMove"] is None


def test_rejects_unsupported_mode():
    response = client.post("/api/game", json={"mode": "online"})
    assert response.status_code == 422


def test_missing_game_returns_404():
    assert client.get("/api/game/missing").status_code == 404


def test_pvp_turns_alternate_and_win_is_tallied():
    game_id = client.post("/api/game", json={"mode": "pvp"}).json()["id"]

    state = None
    for cell in (0, 3, 1, 4, 2):
        response = _play(game_id, cell)
        assert response.status_code == 200
        state = response.json()

    assert state["winner"] == "X"
    assert state["winningLine"] == [0, 1, 2]
    assert state["board"][:3] == ["X", "X", "X"]
    assert state["board"][3:5] == ["O", "O"]
    assert state["scores"] == {"X": 1, "O": 0, "draws": 0}
    assert state["lastMove"] == {"player": "X", "cellIndex": 2}

    finished = _play(game_id, 8)
    assert finished.status_code == 400


def test_occupied_cell_rejected():
    game_id = client.post("/api/game", json={"mode": "pvp"}).json()["id"]
    assert _play(game_id, 4).status_code == 200

    duplicate = _play(game_id, 4)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"]
    assert client.get(f"/api/game/{game_id}").json()["currentPlayer"] == "O"


def test_out_of_range_cell_rejected():
    game_id = client.post("/api/game", json={"mode": "pvp"}).json()["id"]
    assert _play(game_id, 9).status_code == 422


def test_ai_replies_after_player_move():
    game_id = client.post("/api/game", json={"mode": "ai"}).json()["id"]

    response = _play(game_id, 4)
    assert response.status_code == 200
    state = response.json()
    assert state["board"][4] == "X"
    assert state["currentPlayer"] == "O"
    assert state["aiPending"] is True

    time.sleep(0.01)
    follow_up = client.get(f"/api/game/{game_id}").json()
    assert follow_up["aiPending"] is False
    assert follow_up["board"][0] == "O"
    assert follow_up["currentPlayer"] == "X"
    assert follow_up["moveLog"][-1] == {"player": "O", "cellIndex": 0}


def test_optimal_player_draws_against_ai():
    game_id = client.post("/api/game", json={"mode": "ai"}).json()["id"]

    state = client.get(f"/api/game/{game_id}").json()
    while not state["winner"] and not state["drawn"]:
        board = [c or " " for c in state["board"]]
        assert _play(game_id, select_ai_move(board, "X")).status_code == 200
        state = client.get(f"/api/game/{game_id}").json()

    assert state["drawn"] is True
    assert state["winningLine"] is None
    assert state["scores"] == {"X": 0, "O": 0, "draws": 1}


def test_restart_keeps_scores_and_mode():
    game_id = client.post("/api/game", json={"mode": "pvp"}).json()["id"]
    for cell in (0, 3, 1, 4, 2):
        _play(game_id, cell)

    response = client.post(f"/api/game/{game_id}/restart")
    assert response.status_code == 200
    state = response.json()
    assert state["mode"] == "pvp"
    assert state["board"] == [""] * 9
    assert state["currentPlayer"] == "X"
    assert state["winner"] is None
    assert state["moveLog"] == []
    assert state["scores"]["X"] == 1


def test_restart_discards_pending_ai_move():
    game_id = client.post("/api/game", json={"mode": "ai"}).json()["id"]
    session = ui.SESSIONS[game_id]
    session.play(4)
    session.ai_pending = True
    stale_round = session.round

    client.post(f"/api/game/{game_id}/restart")
    ui._run_ai_turn(game_id, stale_round)

    state = client.get(f"/api/game/{game_id}").json()
    assert state["board"] == [""] * 9
    assert state["aiPending"] is False


def test_player_cannot_move_for_ai():
    game_id = client.post("/api/game", json={"mode": "ai"}).json()["id"]
    session = ui.SESSIONS[game_id]
    session.play(4)

    with pytest.raises(HTTPException) as excinfo:
        ui._apply_player_move(game_id, session, 0)
    assert excinfo.value.status_code == 400
    assert session.board[0] == " "


def test_delete_game():
    game_id = client.post("/api/game", json={"mode": "ai"}).json()["id"]
    assert client.delete(f"/api/game/{game_id}").status_code == 204
    assert client.get(f"/api/game/{game_id}").status_code == 404
    assert client.delete(f"/api/game/{game_id}").status_code == 404


def test_index_serves_page():
    response = client.get("/")
    assert response.status_code == 200
    assert "TIC TAC TOE" in response.text
