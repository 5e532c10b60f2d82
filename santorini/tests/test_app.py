"""
Tests for the FastAPI adapter.

Tests:
- Session routes and lobby routes
- Move submission and error mapping
- WebSocket snapshot push
"""

import logging

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.service import APIService


def _place(x, y):
    return {"kind": "place", "position": {"x": x, "y": y}}


@pytest.fixture
def client(service: APIService):
    with TestClient(create_app(service)) as test_client:
        yield test_client


@pytest.fixture
def session_id(client: TestClient) -> str:
    """A started two-player match."""
    sid = client.post("/api/v1/sessions", json={"player_count": 2}).json()["session_id"]
    client.post(f"/api/v1/sessions/{sid}/players", json={"player_id": "alice"})
    client.post(f"/api/v1/sessions/{sid}/players", json={"player_id": "bob"})
    client.post(f"/api/v1/sessions/{sid}/start")
    return sid


class TestSystemRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_factory_leaves_logging_alone(self, service):
        """Building the app does not reconfigure the root logger."""
        root = logging.getLogger()
        level, handlers = root.level, list(root.handlers)

        create_app(service)

        assert root.level == level
        assert root.handlers == handlers


class TestSessionRoutes:
    """Create, list, read, end."""

    def test_create(self, client):
        response = client.post("/api/v1/sessions", json={"player_count": 3})

        assert response.status_code == 201
        data = response.json()
        assert data["phase"] == "not_started"
        assert data["api_version"] == "v1"
        assert len(data["board"]) == 5

    def test_create_rejects_bad_count(self, client):
        response = client.post("/api/v1/sessions", json={"player_count": 5})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_list_and_end(self, client, session_id):
        listed = client.get("/api/v1/sessions").json()
        assert listed == {"sessions": [session_id], "count": 1}

        response = client.delete(f"/api/v1/sessions/{session_id}")
        assert response.json() == {"success": True, "session_id": session_id}
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_get_with_viewer(self, client, session_id):
        data = client.get(f"/api/v1/sessions/{session_id}", params={"player_id": "alice"}).json()
        assert data["current_player_id"] == "alice"
        assert len(data["available_moves"]) == 25

        data = client.get(f"/api/v1/sessions/{session_id}", params={"player_id": "bob"}).json()
        assert data["available_moves"] == []

    def test_missing_session(self, client):
        response = client.get("/api/v1/sessions/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "GAME_NOT_FOUND"


class TestLobbyRoutes:
    """Join, leave, ready, start."""

    def test_join_full(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/players", json={"player_id": "carol"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "GAME_ALREADY_STARTED"

    def test_duplicate_join(self, client):
        sid = client.post("/api/v1/sessions", json={"player_count": 3}).json()["session_id"]
        client.post(f"/api/v1/sessions/{sid}/players", json={"player_id": "alice"})
        response = client.post(f"/api/v1/sessions/{sid}/players", json={"player_id": "alice"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_PLAYER"

    def test_leave(self, client):
        sid = client.post("/api/v1/sessions", json={"player_count": 2}).json()["session_id"]
        client.post(f"/api/v1/sessions/{sid}/players", json={"player_id": "alice"})
        data = client.delete(f"/api/v1/sessions/{sid}/players/alice").json()
        assert data["players"] == []

    def test_ready_auto_start(self, client):
        sid = client.post("/api/v1/sessions", json={"player_count": 2}).json()["session_id"]
        for pid in ("alice", "bob"):
            client.post(f"/api/v1/sessions/{sid}/players", json={"player_id": pid})
        client.post(f"/api/v1/sessions/{sid}/players/alice/ready", json={"ready": True})
        data = client.post(f"/api/v1/sessions/{sid}/players/bob/ready", json={}).json()
        assert data["phase"] == "setup"

    def test_start_not_ready(self, client):
        sid = client.post("/api/v1/sessions", json={"player_count": 2}).json()["session_id"]
        response = client.post(f"/api/v1/sessions/{sid}/start")
        assert response.status_code == 409
        assert response.json()["error_code"] == "NOT_READY"


class TestMoveRoutes:
    """Legal moves and submission."""

    def test_legal_moves(self, client, session_id):
        data = client.get(f"/api/v1/sessions/{session_id}/moves", params={"player_id": "alice"}).json()
        assert data["player_id"] == "alice"
        assert data["moves"][0] == {"kind": "place", "position": {"x": 0, "y": 0}}

    def test_submit(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/moves",
            json={"player_id": "alice", "move": _place(2, 2)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["current_player_id"] == "bob"
        assert data["board"][2][2]["occupant"] == {"player_id": "alice", "worker_id": 1}
        assert data["last_move"] == _place(2, 2)
        assert data["changes"] == ["alice: place (2,2)"]

    def test_submit_worker_move_shape(self, client, session_id):
        for player, pos in [("alice", (1, 1)), ("bob", (3, 3)), ("alice", (1, 3)), ("bob", (3, 1))]:
            client.post(
                f"/api/v1/sessions/{session_id}/moves",
                json={"player_id": player, "move": _place(*pos)},
            )

        move = {"kind": "move", "worker_id": 1, "from": {"x": 1, "y": 1}, "to": {"x": 2, "y": 2}}
        response = client.post(
            f"/api/v1/sessions/{session_id}/moves",
            json={"player_id": "alice", "move": move},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["phase"] == "build"
        assert data["last_move"] == move

    def test_illegal_move(self, client, session_id):
        client.post(f"/api/v1/sessions/{session_id}/moves", json={"player_id": "alice", "move": _place(0, 0)})
        before = client.get(f"/api/v1/sessions/{session_id}").json()

        response = client.post(
            f"/api/v1/sessions/{session_id}/moves",
            json={"player_id": "bob", "move": _place(0, 0)},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "ILLEGAL_MOVE"
        assert body["details"]["reason"] == "occupied"
        assert client.get(f"/api/v1/sessions/{session_id}").json() == before

    def test_wrong_player(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/moves",
            json={"player_id": "bob", "move": _place(0, 0)},
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_CURRENT_PLAYER"

    def test_unknown_move_kind(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/moves",
            json={"player_id": "alice", "move": {"kind": "fly", "position": {"x": 0, "y": 0}}},
        )
        assert response.status_code == 422

    def test_extra_move_fields_rejected(self, client, session_id):
        """A move carrying fields of another kind is a validation error, not a placement."""
        move = {"kind": "place", "position": {"x": 0, "y": 0}, "worker_id": 2, "to": {"x": 4, "y": 4}}
        response = client.post(
            f"/api/v1/sessions/{session_id}/moves",
            json={"player_id": "alice", "move": move},
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert client.get(f"/api/v1/sessions/{session_id}").json()["board"][0][0]["occupant"] is None


class TestWebSocket:
    """Snapshot push to subscribers."""

    def test_initial_state_and_ping(self, client, session_id):
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as ws:
            message = ws.receive_json()
            assert message["type"] == "state_update"
            assert message["payload"]["session_id"] == session_id

            ws.send_text('{"type": "ping"}')
            assert ws.receive_json() == {"type": "pong"}

    def test_non_object_frame_keeps_connection(self, client, session_id):
        """A JSON frame that is not an object gets an error reply and the socket stays open."""
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as ws:
            ws.receive_json()

            ws.send_text("[1, 2]")
            message = ws.receive_json()
            assert message["type"] == "error"
            assert message["payload"]["message"] == "Expected a JSON object"

            ws.send_text('{"type": "ping"}')
            assert ws.receive_json() == {"type": "pong"}

    def test_move_is_broadcast(self, client, session_id):
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as ws:
            ws.receive_json()
            client.post(
                f"/api/v1/sessions/{session_id}/moves",
                json={"player_id": "alice", "move": _place(4, 4)},
            )
            message = ws.receive_json()
            assert message["type"] == "state_update"
            assert message["payload"]["current_player_id"] == "bob"

    def test_unknown_session(self, client):
        with client.websocket_connect("/api/v1/sessions/nope/ws") as ws:
            message = ws.receive_json()
            assert message["type"] == "error"
