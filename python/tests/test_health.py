"""Tests for the health endpoint.

The health endpoint is a liveness check that:
- Does not touch the completion backends
- Reports row counts of the in-memory store
- Always returns 200 if the process is running
"""

from fastapi.testclient import TestClient


class TestHealthEndpoint:
    """Tests for GET /health"""

    def test_health_returns_200(self, client: TestClient):
        """Health endpoint returns 200 OK."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_correct_envelope(self, client: TestClient):
        """Health endpoint returns proper success envelope."""
        response = client.get("/health")
        data = response.json()

        assert "data" in data
        assert data["data"]["status"] == "ok"

    def test_health_reports_seeded_row_counts(self, client: TestClient):
        """Store stats reflect the sample dataset."""
        stats = client.get("/health").json()["data"]["store"]

        assert stats["users"] == 1
        assert stats["materials"] == 3
        assert stats["sessions"] == 3
        assert stats["flashcards"] == 1
        assert stats["conversations"] == 1
        assert stats["badges"] == 3

    def test_health_content_type_is_json(self, client: TestClient):
        """Health endpoint returns JSON content type."""
        response = client.get("/health")
        assert response.headers["content-type"] == "application/json"

    def test_health_is_not_under_api_prefix(self, client: TestClient):
        response = client.get("/api/health")
        assert response.status_code == 404
