"""Test helpers for completion doubles and app clients.

Provides:
- ScriptedAdapter: a BackendAdapter that replays queued outcomes, no HTTP
- make_provider: CompletionProvider over scripted adapters
- make_client: TestClient over an app with an injected store and provider
"""

from typing import Any

from fastapi.testclient import TestClient

from studybuddy.app import add_request_id_middleware, create_app
from studybuddy.services.llm import (
    BackendAdapter,
    CompletionProvider,
    CompletionRequest,
    CompletionResponse,
    StructuredResponse,
)
from studybuddy.store import MemoryStore

DISPLAY_NAMES = {"openai": "OpenAI", "gemini": "Gemini"}


class ScriptedAdapter(BackendAdapter):
    """Adapter double that replays outcomes in order.

    Each outcome is either a value (str for complete, dict for complete_json)
    or an exception instance to raise. Every call is recorded in `calls`.
    """

    def __init__(self, name: str, outcomes: list[Any] | None = None):
        super().__init__(None, api_key="test-key", model_name=f"{name}-test-model")  # type: ignore[arg-type]
        self.name = name
        self.display_name = DISPLAY_NAMES.get(name, name.title())
        self._outcomes = list(outcomes or [])
        self.calls: list[CompletionRequest] = []

    def queue(self, *outcomes: Any) -> "ScriptedAdapter":
        self._outcomes.extend(outcomes)
        return self

    def _next(self, req: CompletionRequest) -> Any:
        self.calls.append(req)
        if not self._outcomes:
            raise AssertionError(f"{self.name} adapter called more times than scripted")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def complete(self, req: CompletionRequest) -> CompletionResponse:
        return CompletionResponse(text=self._next(req), usage=None, provider_request_id=None)

    async def complete_json(self, req: CompletionRequest) -> StructuredResponse:
        return StructuredResponse(data=self._next(req), usage=None, provider_request_id=None)


def make_provider(*adapters: BackendAdapter, max_tokens: int = 256) -> CompletionProvider:
    """Build a provider over the given adapters (none → unavailable)."""
    return CompletionProvider(list(adapters), max_tokens=max_tokens)


def make_client(
    store: MemoryStore,
    provider: CompletionProvider,
    *,
    with_request_id: bool = True,
) -> TestClient:
    """TestClient for an app serving the given store and provider.

    Use as a context manager so the app lifespan runs.
    """
    app = create_app(store=store, completion_provider=provider)
    if with_request_id:
        add_request_id_middleware(app, log_requests=False)
    return TestClient(app)
