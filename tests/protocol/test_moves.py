from __future__ import annotations

from fastapi.testclient import TestClient

from chess960.protocol.http.app import create_app


START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def _new_game(client: TestClient, fen: str = START_FEN) -> str:
    return client.post("/api/games", json={"fen": fen}).json()["game_id"]


def test_move_updates_state() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"from": "g1", "to": "f3", "color": "w"})
    assert r.status_code == 200
    state = r.json()
    assert state["side_to_move"] == "b"
    assert state["last_move"] == "g1f3"
    assert state["move_history"] == ["g1f3"]
    assert state["fen"] == "rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R b KQkq - 1 1"


def test_illegal_move_returns_envelope_and_keeps_state() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"from": "e2", "to": "e5"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "illegal_move"
    assert err["type"] == "client_error"
    assert client.get(f"/api/games/{game_id}/state").json()["fen"] == START_FEN


def test_move_for_wrong_color_is_rejected() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"from": "e7", "to": "e5", "color": "b"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "not Black's turn"


def test_bad_square_is_bad_request() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"from": "e2", "to": "e9"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_checkmate_reported_in_state() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client, "7k/Q7/6K1/8/8/8/8/8 w - - 0 1")
    state = client.post(f"/api/games/{game_id}/move", json={"from": "a7", "to": "g7"}).json()
    assert state["checkmate"] is True
    assert state["in_check"] is True
    assert state["game_over"] is True
    assert state["result"] == "checkmate"
    assert state["winner"] == "w"
    assert state["score"] == "1-0"
    assert state["legal_moves"] == []

    r = client.post(f"/api/games/{game_id}/move", json={"from": "h8", "to": "g8"})
    assert r.status_code == 400


def test_resign_and_draw() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    state = client.post(f"/api/games/{game_id}/resign", json={"color": "w"}).json()
    assert state["result"] == "resignation"
    assert state["winner"] == "b"
    assert state["score"] == "0-1"

    r = client.post(f"/api/games/{game_id}/draw")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"

    game_id = _new_game(client)
    state = client.post(f"/api/games/{game_id}/draw").json()
    assert state["draw"] is True
    assert state["result"] == "agreement"
    assert state["winner"] is None
    assert state["score"] == "1/2-1/2"


def test_perft_endpoint() -> None:
    client = TestClient(create_app())
    r = client.post("/api/perft", json={"fen": START_FEN, "depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400}
    assert client.post("/api/perft", json={"fen": "bogus", "depth": 1}).status_code == 400
    assert client.post("/api/perft", json={"fen": START_FEN, "depth": 3}).json() == {"nodes": 8902}


def test_perft_depth_is_capped() -> None:
    client = TestClient(create_app())
    r = client.post("/api/perft", json={"fen": START_FEN, "depth": 4})
    assert r.status_code == 422
    assert r.json()["error"]["field_errors"][0]["field"] == "body.depth"
    assert client.post("/api/perft", json={"fen": START_FEN, "depth": -1}).status_code == 422
