"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from studybuddy.api.routes.ai import router as ai_router
from studybuddy.api.routes.auth import router as auth_router
from studybuddy.api.routes.conversations import router as conversations_router
from studybuddy.api.routes.flashcards import router as flashcards_router
from studybuddy.api.routes.health import router as health_router
from studybuddy.api.routes.materials import router as materials_router
from studybuddy.api.routes.sessions import router as sessions_router
from studybuddy.api.routes.users import router as users_router

API_PREFIX = "/api"


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    /health is served at the root; everything else lives under /api.

    Returns:
        Configured APIRouter with all routes registered.
    """
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(auth_router, prefix=API_PREFIX, tags=["auth"])
    api_router.include_router(users_router, prefix=API_PREFIX, tags=["users"])
    api_router.include_router(materials_router, prefix=API_PREFIX, tags=["materials"])
    api_router.include_router(sessions_router, prefix=API_PREFIX, tags=["sessions"])
    api_router.include_router(flashcards_router, prefix=API_PREFIX, tags=["flashcards"])
    api_router.include_router(conversations_router, prefix=API_PREFIX)
    api_router.include_router(ai_router, prefix=API_PREFIX, tags=["ai"])

    return api_router


__all__ = ["create_api_router"]
