"""Integration tests for AI feature routes.

Backends are replaced with scripted adapters, so no HTTP leaves the test.

Tests cover:
- Status reporting for configured/unconfigured providers
- 503 when no backend is configured, with the store untouched
- Chat: new conversation, appending to an existing one, ownership
- Summaries stored per call
- Flashcards: filtering bad cards, degrading to a summary card
- Study plans: skipping bad entries, malformed output → 502
- Backend failure after fallback → 502
- Generation events pass through the log guard
"""

from collections.abc import Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from studybuddy.services import study_assistant
from studybuddy.services.llm import MalformedStructuredResponseError
from studybuddy.services.redact import safe_kv
from studybuddy.store import MemoryStore
from tests.helpers import ScriptedAdapter, make_client, make_provider


@pytest.fixture
def openai() -> ScriptedAdapter:
    return ScriptedAdapter("openai")


@pytest.fixture
def gemini() -> ScriptedAdapter:
    return ScriptedAdapter("gemini")


@pytest.fixture
def ai_client(
    seeded_store: MemoryStore, openai: ScriptedAdapter, gemini: ScriptedAdapter
) -> Generator[TestClient, None, None]:
    """Client whose provider has both backends, scripted per test."""
    with make_client(seeded_store, make_provider(openai, gemini)) as client:
        yield client


def _malformed(provider: str) -> MalformedStructuredResponseError:
    return MalformedStructuredResponseError("Response is not valid JSON", provider=provider)


class TestStatus:
    def test_unavailable(self, client: TestClient):
        response = client.get("/api/ai/status")

        assert response.status_code == 200
        assert response.json()["data"] == {"available": False, "service": "None"}

    def test_primary_reported(self, ai_client: TestClient):
        assert ai_client.get("/api/ai/status").json()["data"] == {
            "available": True,
            "service": "OpenAI",
        }

    def test_secondary_only(self, seeded_store: MemoryStore):
        provider = make_provider(ScriptedAdapter("gemini"))
        with make_client(seeded_store, provider) as client:
            data = client.get("/api/ai/status").json()["data"]

        assert data == {"available": True, "service": "Gemini"}


class TestUnavailable:
    @pytest.mark.parametrize(
        "path,body",
        [
            ("/api/ai/chat", {"user_id": 1, "message": "Hi"}),
            ("/api/ai/summarize", {"user_id": 1, "material_id": 1, "content": "Text"}),
            ("/api/ai/flashcards", {"user_id": 1, "topic": "Cells"}),
            (
                "/api/ai/study-plan",
                {"user_id": 1, "topics": ["Cells"], "duration_days": 2, "hours_per_day": 1},
            ),
        ],
    )
    def test_returns_503_and_leaves_store_untouched(
        self, client: TestClient, seeded_store: MemoryStore, path: str, body: dict
    ):
        before = seeded_store.stats()

        response = client.post(path, json=body)

        assert response.status_code == 503
        error = response.json()["error"]
        assert error["code"] == "E_AI_UNAVAILABLE"
        assert "OPENAI_API_KEY" in error["message"]
        assert seeded_store.stats() == before


class TestChat:
    def test_new_conversation(self, ai_client: TestClient, openai: ScriptedAdapter):
        openai.queue("Mitochondria make ATP.")

        response = ai_client.post(
            "/api/ai/chat", json={"user_id": 1, "message": "What do mitochondria do?"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["response"] == "Mitochondria make ATP."
        assert data["conversation"]["id"] == 2
        assert data["conversation"]["messages"] == [
            {"role": "user", "content": "What do mitochondria do?"},
            {"role": "assistant", "content": "Mitochondria make ATP."},
        ]

    def test_prompt_has_system_turn_then_user(self, ai_client: TestClient, openai: ScriptedAdapter):
        openai.queue("ok")

        ai_client.post("/api/ai/chat", json={"user_id": 1, "message": "Hello"})

        (request,) = openai.calls
        assert [t.role for t in request.messages] == ["system", "user"]
        assert request.messages[-1].content == "Hello"

    def test_existing_conversation_sends_history_and_appends(
        self, ai_client: TestClient, openai: ScriptedAdapter, seeded_store: MemoryStore
    ):
        openai.queue("Backpropagation adjusts the weights.")

        response = ai_client.post(
            "/api/ai/chat",
            json={"user_id": 1, "conversation_id": 1, "message": "How do they learn?"},
        )

        assert response.status_code == 200
        (request,) = openai.calls
        assert [t.role for t in request.messages] == [
            "system",
            "assistant",
            "user",
            "assistant",
            "user",
        ]
        stored = seeded_store.get_conversation(1)
        assert len(stored.messages) == 5
        assert stored.messages[-1].content == "Backpropagation adjusts the weights."

    def test_fallback_reply_is_used(
        self, ai_client: TestClient, openai: ScriptedAdapter, gemini: ScriptedAdapter
    ):
        openai.queue(httpx.ConnectError("refused"))
        gemini.queue("From the fallback.")

        response = ai_client.post("/api/ai/chat", json={"user_id": 1, "message": "Hi"})

        assert response.json()["data"]["response"] == "From the fallback."

    def test_backend_failure_returns_502_without_writes(
        self,
        ai_client: TestClient,
        openai: ScriptedAdapter,
        gemini: ScriptedAdapter,
        seeded_store: MemoryStore,
    ):
        openai.queue(httpx.ReadTimeout("slow"))
        gemini.queue(httpx.ReadTimeout("slow"))
        before = seeded_store.get_conversation(1)

        response = ai_client.post(
            "/api/ai/chat", json={"user_id": 1, "conversation_id": 1, "message": "Hi"}
        )

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "E_AI_BACKEND_FAILED"
        assert seeded_store.get_conversation(1) == before
        assert seeded_store.stats()["conversations"] == 1

    def test_other_users_conversation_is_not_found(
        self, ai_client: TestClient, seeded_store: MemoryStore, openai: ScriptedAdapter
    ):
        other = seeded_store.create_user(
            username="riley", password="pw123456", name="Riley", email="r@example.com"
        )

        response = ai_client.post(
            "/api/ai/chat",
            json={"user_id": other.id, "conversation_id": 1, "message": "Hi"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E_CONVERSATION_NOT_FOUND"
        assert openai.calls == []

    def test_unknown_user_404(self, ai_client: TestClient, openai: ScriptedAdapter):
        response = ai_client.post("/api/ai/chat", json={"user_id": 9, "message": "Hi"})

        assert response.status_code == 404
        assert openai.calls == []

    def test_empty_message_rejected(self, ai_client: TestClient):
        response = ai_client.post("/api/ai/chat", json={"user_id": 1, "message": ""})

        assert response.status_code == 400


class TestSummarize:
    def test_summary_stored(
        self, ai_client: TestClient, openai: ScriptedAdapter, seeded_store: MemoryStore
    ):
        openai.queue("# Key points\n- Memory is reconstructive")

        response = ai_client.post(
            "/api/ai/summarize",
            json={"user_id": 1, "material_id": 1, "content": "Chapter 4: Memory..."},
        )

        assert response.status_code == 201
        summary = response.json()["data"]
        assert summary["material_id"] == 1
        assert summary["content"].startswith("# Key points")
        assert len(seeded_store.list_summaries_for_material(1)) == 1
        (request,) = openai.calls
        assert request.messages[-1].content == "Chapter 4: Memory..."

    def test_unknown_material_404(self, ai_client: TestClient, openai: ScriptedAdapter):
        response = ai_client.post(
            "/api/ai/summarize", json={"user_id": 1, "material_id": 99, "content": "x"}
        )

        assert response.status_code == 404
        assert openai.calls == []

    def test_material_deleted_during_completion_is_not_summarized(
        self, seeded_store: MemoryStore
    ):
        class DeletesMaterial(ScriptedAdapter):
            async def complete(self, req):
                seeded_store.delete_material(1)
                return await super().complete(req)

        provider = make_provider(DeletesMaterial("openai", ["Summary of a deleted file"]))
        with make_client(seeded_store, provider) as client:
            response = client.post(
                "/api/ai/summarize", json={"user_id": 1, "material_id": 1, "content": "Text"}
            )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E_MATERIAL_NOT_FOUND"
        assert seeded_store.list_summaries_for_material(1) == []

    def test_oversized_content_rejected(self, ai_client: TestClient, openai: ScriptedAdapter):
        response = ai_client.post(
            "/api/ai/summarize",
            json={"user_id": 1, "material_id": 1, "content": "x" * 100_001},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"
        assert openai.calls == []


class TestFlashcardGeneration:
    def test_cards_stored_and_bad_entries_dropped(
        self, ai_client: TestClient, openai: ScriptedAdapter, seeded_store: MemoryStore
    ):
        openai.queue(
            {
                "flashcards": [
                    {"question": "What is a cell?", "answer": "The basic unit of life."},
                    {"question": "Missing answer"},
                    {"question": "", "answer": "Blank question"},
                    "not an object",
                    {"question": "What is ATP?", "answer": "Energy currency."},
                ]
            }
        )

        response = ai_client.post(
            "/api/ai/flashcards",
            json={"user_id": 1, "material_id": 1, "topic": "Cells", "count": 5},
        )

        assert response.status_code == 201
        cards = response.json()["data"]
        assert [c["question"] for c in cards] == ["What is a cell?", "What is ATP?"]
        assert all(c["material_id"] == 1 for c in cards)
        assert len(seeded_store.list_flashcards_for_user(1)) == 3

    def test_empty_deck_returns_empty_list(self, ai_client: TestClient, openai: ScriptedAdapter):
        openai.queue({"flashcards": []})

        response = ai_client.post("/api/ai/flashcards", json={"user_id": 1, "topic": "Cells"})

        assert response.status_code == 201
        assert response.json()["data"] == []

    def test_malformed_output_degrades_to_summary_card(
        self, ai_client: TestClient, openai: ScriptedAdapter, gemini: ScriptedAdapter
    ):
        openai.queue(_malformed("openai"), "Cells are the basic unit of life.")
        gemini.queue(_malformed("gemini"))

        response = ai_client.post("/api/ai/flashcards", json={"user_id": 1, "topic": "Cells"})

        assert response.status_code == 201
        (card,) = response.json()["data"]
        assert card["question"] == "Key concepts about Cells?"
        assert card["answer"] == "Cells are the basic unit of life."

    def test_degraded_card_with_empty_overview(
        self, ai_client: TestClient, openai: ScriptedAdapter, gemini: ScriptedAdapter
    ):
        openai.queue({"cards": "wrong shape"}, "")
        gemini.queue(_malformed("gemini"))

        response = ai_client.post("/api/ai/flashcards", json={"user_id": 1, "topic": "Cells"})

        (card,) = response.json()["data"]
        assert card["answer"] == "Information about Cells"

    def test_malformed_primary_then_unreachable_secondary_degrades(
        self,
        ai_client: TestClient,
        openai: ScriptedAdapter,
        gemini: ScriptedAdapter,
        seeded_store: MemoryStore,
    ):
        openai.queue(_malformed("openai"), "Cells are the basic unit of life.")
        gemini.queue(httpx.ConnectError("down"))

        response = ai_client.post("/api/ai/flashcards", json={"user_id": 1, "topic": "Cells"})

        assert response.status_code == 201
        (card,) = response.json()["data"]
        assert card["answer"] == "Cells are the basic unit of life."
        assert len(seeded_store.list_flashcards_for_user(1)) == 2

    def test_backend_failure_is_not_degraded(
        self, ai_client: TestClient, openai: ScriptedAdapter, gemini: ScriptedAdapter
    ):
        openai.queue(httpx.ConnectError("down"))
        gemini.queue(httpx.ConnectError("down"))

        response = ai_client.post("/api/ai/flashcards", json={"user_id": 1, "topic": "Cells"})

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "E_AI_BACKEND_FAILED"

    def test_dangling_material_rejected_before_completion(
        self, ai_client: TestClient, openai: ScriptedAdapter
    ):
        response = ai_client.post(
            "/api/ai/flashcards", json={"user_id": 1, "material_id": 99, "topic": "Cells"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_MATERIAL_REFERENCE"
        assert openai.calls == []

    def test_count_bounds(self, ai_client: TestClient):
        response = ai_client.post(
            "/api/ai/flashcards", json={"user_id": 1, "topic": "Cells", "count": 21}
        )

        assert response.status_code == 400


class TestStudyPlan:
    BODY = {
        "user_id": 1,
        "topics": ["Algebra", "Geometry"],
        "duration_days": 2,
        "hours_per_day": 1.5,
    }

    def test_valid_sessions_stored_bad_ones_skipped(
        self, ai_client: TestClient, openai: ScriptedAdapter, seeded_store: MemoryStore
    ):
        openai.queue(
            {
                "sessions": [
                    {
                        "title": "Algebra basics",
                        "subject": "Algebra",
                        "startTime": "2030-01-02T09:00:00Z",
                        "endTime": "2030-01-02T10:30:00Z",
                    },
                    {
                        "title": "Backwards",
                        "subject": "Geometry",
                        "startTime": "2030-01-03T11:00:00Z",
                        "endTime": "2030-01-03T10:00:00Z",
                    },
                    {"title": "No times", "subject": "Geometry"},
                    {
                        "title": "Bad time",
                        "subject": "Geometry",
                        "startTime": "tomorrow morning",
                        "endTime": "2030-01-03T10:00:00Z",
                    },
                    {
                        "title": "Triangles",
                        "subject": "Geometry",
                        "startTime": "2030-01-03T09:00:00",
                        "endTime": "2030-01-03T10:30:00",
                    },
                ]
            }
        )

        response = ai_client.post("/api/ai/study-plan", json=self.BODY)

        assert response.status_code == 201
        sessions = response.json()["data"]
        assert [s["title"] for s in sessions] == ["Algebra basics", "Triangles"]
        assert all(s["is_completed"] is False for s in sessions)
        assert seeded_store.stats()["sessions"] == 5

    def test_malformed_plan_returns_502(
        self,
        ai_client: TestClient,
        openai: ScriptedAdapter,
        gemini: ScriptedAdapter,
        seeded_store: MemoryStore,
    ):
        openai.queue({"plan": []})
        gemini.queue(_malformed("gemini"))

        response = ai_client.post("/api/ai/study-plan", json=self.BODY)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "E_AI_MALFORMED_RESPONSE"
        assert seeded_store.stats()["sessions"] == 3

    def test_blank_topics_rejected(self, ai_client: TestClient):
        body = {**self.BODY, "topics": ["  "]}

        assert ai_client.post("/api/ai/study-plan", json=body).status_code == 400

    def test_hours_bounds(self, ai_client: TestClient):
        body = {**self.BODY, "hours_per_day": 0}

        assert ai_client.post("/api/ai/study-plan", json=body).status_code == 400



class TestGenerationLogging:
    @pytest.fixture
    def guarded(self, monkeypatch: pytest.MonkeyPatch) -> list[set[str]]:
        """Key sets handed to safe_kv by the study assistant."""
        seen: list[set[str]] = []

        def recording_safe_kv(**kwargs):
            seen.append(set(kwargs))
            return safe_kv(**kwargs)

        monkeypatch.setattr(study_assistant, "safe_kv", recording_safe_kv)
        return seen

    def test_generated_flashcards_logged_through_guard(
        self, ai_client: TestClient, openai: ScriptedAdapter, guarded: list[set[str]]
    ):
        openai.queue({"flashcards": [{"question": "Q?", "answer": "A."}]})

        ai_client.post("/api/ai/flashcards", json={"user_id": 1, "topic": "Cells"})

        assert {"user_id", "requested", "received", "stored"} in guarded

    def test_degraded_flashcards_logged_through_guard(
        self,
        ai_client: TestClient,
        openai: ScriptedAdapter,
        gemini: ScriptedAdapter,
        guarded: list[set[str]],
    ):
        openai.queue(_malformed("openai"), "Overview")
        gemini.queue(_malformed("gemini"))

        ai_client.post("/api/ai/flashcards", json={"user_id": 1, "topic": "Cells"})

        assert {"user_id", "error_class", "fallback_attempted"} in guarded

    def test_study_plan_logged_through_guard(
        self, ai_client: TestClient, openai: ScriptedAdapter, guarded: list[set[str]]
    ):
        openai.queue({"sessions": []})

        ai_client.post(
            "/api/ai/study-plan",
            json={"user_id": 1, "topics": ["Cells"], "duration_days": 1, "hours_per_day": 1},
        )

        assert {"user_id", "duration_days", "received", "stored"} in guarded
