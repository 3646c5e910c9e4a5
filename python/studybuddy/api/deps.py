"""FastAPI dependencies for route handlers.

The store and the completion provider are created by the app factory and
held on app.state; handlers receive them through these getters.
"""

from fastapi import Request

from studybuddy.services.llm import CompletionProvider
from studybuddy.store import MemoryStore

__all__ = ["get_completion_provider", "get_store"]


def get_store(request: Request) -> MemoryStore:
    """Get the process-wide in-memory store from app state."""
    return request.app.state.store


def get_completion_provider(request: Request) -> CompletionProvider:
    """Get the shared completion provider from app state.

    - The provider is built at app startup around a shared httpx.AsyncClient
    - Tests inject their own provider through create_app

    Args:
        request: The incoming request (provides access to app.state)

    Returns:
        The shared CompletionProvider instance.
    """
    return request.app.state.completion_provider
