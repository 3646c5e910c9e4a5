"""Pytest configuration and fixtures for StudyBuddy tests.

Test isolation strategy:
- Every test gets a fresh MemoryStore (no shared module-level state)
- AI routes get a CompletionProvider built from scripted adapter doubles
- Settings are read from a clean environment with no backend keys
"""

import sys
from collections.abc import Generator
from pathlib import Path

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi.testclient import TestClient

from studybuddy.config import clear_settings_cache
from studybuddy.services.llm import CompletionProvider
from studybuddy.store import MemoryStore, User, seed_fixtures
from tests.helpers import make_client, make_provider


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every test against test settings with no backend credentials."""
    monkeypatch.setenv("STUDYBUDDY_ENV", "test")
    monkeypatch.setenv("SEED_FIXTURES", "false")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def store() -> MemoryStore:
    """Provide an empty store."""
    return MemoryStore()


@pytest.fixture
def seeded_store(store: MemoryStore) -> MemoryStore:
    """Provide a store holding the sample dataset."""
    seed_fixtures(store)
    return store


@pytest.fixture
def alex(seeded_store: MemoryStore) -> User:
    """The seeded sample user."""
    user = seeded_store.get_user_by_username("alex")
    assert user is not None
    return user


@pytest.fixture
def unavailable_provider() -> CompletionProvider:
    """Provider with no backend configured."""
    return make_provider()


@pytest.fixture
def client(
    seeded_store: MemoryStore, unavailable_provider: CompletionProvider
) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client over the seeded store, AI unavailable."""
    with make_client(seeded_store, unavailable_provider) as client:
        yield client
