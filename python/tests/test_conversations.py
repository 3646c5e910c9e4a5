"""Integration tests for conversation routes.

Tests cover:
- Create with an initial message list
- Get/list (newest first)
- PUT replaces the whole message list
- Role and content validation
- Delete
"""

from fastapi.testclient import TestClient


def _create(client: TestClient, messages: list[dict] | None = None, user_id: int = 1):
    return client.post(
        "/api/conversations", json={"user_id": user_id, "messages": messages or []}
    )


class TestConversations:
    def test_create_empty(self, client: TestClient):
        response = _create(client)

        assert response.status_code == 201
        conversation = response.json()["data"]
        assert conversation["id"] == 2
        assert conversation["messages"] == []

    def test_create_with_messages(self, client: TestClient):
        messages = [
            {"role": "user", "content": "What is osmosis?"},
            {"role": "assistant", "content": "Movement of water across a membrane."},
        ]

        conversation = _create(client, messages).json()["data"]

        assert conversation["messages"] == messages

    def test_invalid_role_rejected(self, client: TestClient):
        response = _create(client, [{"role": "tool", "content": "x"}])

        assert response.status_code == 400

    def test_too_long_content_rejected(self, client: TestClient):
        response = _create(client, [{"role": "user", "content": "x" * 20_001}])

        assert response.status_code == 400

    def test_create_for_unknown_user_404(self, client: TestClient):
        assert _create(client, user_id=5).status_code == 404

    def test_get_seeded(self, client: TestClient):
        response = client.get("/api/conversations/1")

        assert response.status_code == 200
        messages = response.json()["data"]["messages"]
        assert len(messages) == 3
        assert messages[1]["content"].startswith("Can you explain")

    def test_get_unknown_404(self, client: TestClient):
        response = client.get("/api/conversations/99")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E_CONVERSATION_NOT_FOUND"

    def test_list_newest_first(self, client: TestClient):
        new = _create(client).json()["data"]

        listed = client.get("/api/users/1/conversations").json()["data"]

        assert [c["id"] for c in listed] == [new["id"], 1]

    def test_put_replaces_messages(self, client: TestClient):
        replacement = [{"role": "user", "content": "Start over"}]

        response = client.put("/api/conversations/1", json={"messages": replacement})

        assert response.status_code == 200
        assert response.json()["data"]["messages"] == replacement
        assert client.get("/api/conversations/1").json()["data"]["messages"] == replacement

    def test_put_unknown_404(self, client: TestClient):
        response = client.put("/api/conversations/99", json={"messages": []})

        assert response.status_code == 404

    def test_delete(self, client: TestClient):
        assert client.delete("/api/conversations/1").status_code == 204
        assert client.get("/api/conversations/1").status_code == 404

    def test_delete_unknown_404(self, client: TestClient):
        assert client.delete("/api/conversations/99").status_code == 404
