"""In-memory repository layer.

Usage:
    from studybuddy.store import MemoryStore, seed_fixtures

    store = MemoryStore()
    seed_fixtures(store)
    material = store.get_material(1)  # None when unknown
"""

from studybuddy.store.entities import (
    Badge,
    ChatMessage,
    Conversation,
    Flashcard,
    MaterialSummary,
    StudyMaterial,
    StudySession,
    User,
    UserBadge,
    utcnow,
)
from studybuddy.store.fixtures import seed_fixtures
from studybuddy.store.memory import Collection, DuplicateUsernameError, MemoryStore

__all__ = [
    # Store
    "MemoryStore",
    "Collection",
    "DuplicateUsernameError",
    "seed_fixtures",
    # Entities
    "User",
    "StudyMaterial",
    "StudySession",
    "MaterialSummary",
    "Flashcard",
    "ChatMessage",
    "Conversation",
    "Badge",
    "UserBadge",
    "utcnow",
]
