"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from whiteboard.api.routes.boards import BoardStore, get_store


@pytest.fixture
def store() -> BoardStore:
    return BoardStore(max_boards=3)


@pytest.fixture
def client(store):
    """Test client backed by a fresh in-memory board store."""
    from whiteboard.api.main import create_app

    app = create_app()
    app.dependency_overrides[get_store] = lambda: store

    with TestClient(app) as client:
        yield client


@pytest.fixture
def board_id(client) -> str:
    response = client.post("/api/v1/boards", json={"subject": "science"})
    return response.json()["board_id"]


class TestHealthRoutes:
    """Tests for health check routes."""

    def test_single_health_route(self, client):
        assert client.get("/health").status_code == 404

    def test_versioned_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert "timestamp" in data
        assert "X-Request-ID" not in response.headers

    def test_request_id_header(self, client):
        response = client.get("/api/v1/boards", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestBoardRoutes:
    """Tests for creating, reading and deleting boards."""

    def test_create_board(self, client):
        response = client.post("/api/v1/boards", json={"width": 1280, "height": 720})
        assert response.status_code == 201
        data = response.json()
        assert data["board_id"].startswith("board_")
        assert data["width"] == 1280
        assert data["mode"] == "standard"
        assert data["subject"] == "general"
        assert data["elements"] == 0

    def test_create_board_bad_subject(self, client):
        response = client.post("/api/v1/boards", json={"subject": "music"})
        assert response.status_code == 400

    def test_create_board_bad_size(self, client):
        response = client.post("/api/v1/boards", json={"width": -5})
        assert response.status_code == 422

    def test_board_limit(self, client):
        for _ in range(3):
            assert client.post("/api/v1/boards", json={}).status_code == 201
        response = client.post("/api/v1/boards", json={})
        assert response.status_code == 429

    def test_get_and_list(self, client, board_id):
        assert client.get(f"/api/v1/boards/{board_id}").json()["subject"] == "science"
        listing = client.get("/api/v1/boards").json()
        assert listing["total"] == 1
        assert listing["boards"][0]["board_id"] == board_id

    def test_unknown_board(self, client):
        response = client.get("/api/v1/boards/board_missing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Board not found"

    def test_delete_board(self, client, board_id):
        assert client.delete(f"/api/v1/boards/{board_id}").status_code == 204
        assert client.get(f"/api/v1/boards/{board_id}").status_code == 404
        assert client.delete(f"/api/v1/boards/{board_id}").status_code == 404


class TestCommandRoutes:
    """Tests for command execution over HTTP."""

    def test_execute_command(self, client, board_id):
        response = client.post(
            f"/api/v1/boards/{board_id}/commands",
            json={"id": "c1", "action": "write_text", "content": "Osmosis"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["command_id"] == "c1"
        assert data["commands"][0]["type"] == "text"

    def test_failed_command_is_reported_in_body(self, client, board_id):
        response = client.post(f"/api/v1/boards/{board_id}/commands", json={"action": "teleport"})
        assert response.status_code == 200
        assert response.json()["error_type"] == "validation"

    def test_batch(self, client, board_id):
        response = client.post(
            f"/api/v1/boards/{board_id}/commands/batch",
            json={
                "commands": [
                    {"id": "a", "action": "write_text", "content": "Reactants"},
                    {"id": "b", "action": "write_text", "content": "Products"},
                    {"id": "c", "action": "draw_arrow", "from": "Reactants", "to": "Products"},
                    {"id": "d", "action": "highlight", "reference": "Catalyst"},
                ]
            },
        )
        data = response.json()
        assert [r["command_id"] for r in data["results"]] == ["a", "b", "c", "d"]
        assert data["succeeded"] == 3
        assert data["failed"] == 1

    def test_empty_batch_rejected(self, client, board_id):
        response = client.post(f"/api/v1/boards/{board_id}/commands/batch", json={"commands": []})
        assert response.status_code == 422


class TestToolRoutes:
    """Tests for agent tool calls over HTTP."""

    def test_list_tools(self, client):
        tools = client.get("/api/v1/boards/tools").json()
        assert len(tools) == 10

    def test_call_tool(self, client, board_id):
        response = client.post(
            f"/api/v1/boards/{board_id}/tools/write_text", json={"text": "Energy", "role": "heading"}
        )
        assert response.status_code == 200
        assert response.json()["element_id"].startswith("el_")

    def test_bad_tool_call(self, client, board_id):
        response = client.post(f"/api/v1/boards/{board_id}/tools/draw_unicorn", json={})
        assert response.status_code == 400


class TestStreamRoutes:
    """Tests for the primitive stream and audit history."""

    def test_primitives_since_clear(self, client, board_id):
        client.post(f"/api/v1/boards/{board_id}/tools/write_text", json={"text": "Old"})
        client.post(f"/api/v1/boards/{board_id}/tools/create_new_board", json={})
        client.post(f"/api/v1/boards/{board_id}/tools/write_text", json={"text": "New"})

        everything = client.get(f"/api/v1/boards/{board_id}/primitives").json()
        recent = client.get(f"/api/v1/boards/{board_id}/primitives", params={"since_clear": True}).json()
        assert everything["total"] == 3
        assert [p["text"] for p in recent["primitives"]] == ["New"]

    def test_history(self, client, board_id):
        client.post(
            f"/api/v1/boards/{board_id}/commands",
            json={"action": "write_text", "content": "Logged"},
        )
        client.post(
            f"/api/v1/boards/{board_id}/commands",
            json={"action": "erase", "reference": "Logged"},
        )
        history = client.get(f"/api/v1/boards/{board_id}/history").json()
        assert [e["action"] for e in history["entries"]] == ["element.registered", "element.removed"]

        removed = client.get(
            f"/api/v1/boards/{board_id}/history", params={"action": "element.removed"}
        ).json()
        assert len(removed["entries"]) == 1
