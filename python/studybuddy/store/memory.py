"""In-memory repository for all study entities.

The store is an explicit object owned by the process entry point (the app
factory) and injected into handlers. Tests build a fresh instance each.

Contract (every entity):
- create assigns the next id of its collection (1, 2, 3, ...) and stamps creation time
- get returns None for an unknown id; absence is never an exception
- update shallow-merges the given fields and returns the new snapshot, or None
- delete returns True if a row was removed

Concurrency:
- Sync FastAPI routes run in a thread pool, so all collections share one
  re-entrant lock. Updates are last-write-wins; there is no version check.
- Conversations expose append_messages so chat turns never overwrite each other.
- update_session takes a check that runs on the merged row under the lock.

Nothing here survives a restart. Startup re-seeds via store.fixtures.
"""

import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

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


class DuplicateUsernameError(Exception):
    """Raised when a username is already taken. The store is left unchanged."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username already exists: {username}")


class _Identified(Protocol):
    id: int


E = TypeVar("E", bound=_Identified)


class Collection(Generic[E]):
    """One entity type: an id sequence plus an id -> snapshot map."""

    def __init__(self, factory: Callable[..., E], lock: threading.RLock):
        self._factory = factory
        self._lock = lock
        self._rows: dict[int, E] = {}
        self._next_id = 1

    def insert(self, **fields: Any) -> E:
        with self._lock:
            # Build first: a bad field raises before the sequence advances.
            entity = self._factory(id=self._next_id, **fields)
            self._rows[entity.id] = entity
            self._next_id += 1
            return entity

    def get(self, entity_id: int) -> E | None:
        with self._lock:
            return self._rows.get(entity_id)

    def all(self) -> list[E]:
        with self._lock:
            return list(self._rows.values())

    def filter(self, predicate: Callable[[E], bool]) -> list[E]:
        with self._lock:
            return [row for row in self._rows.values() if predicate(row)]

    def update(self, entity_id: int, **changes: Any) -> E | None:
        if "id" in changes:
            raise ValueError("id cannot be changed")
        with self._lock:
            current = self._rows.get(entity_id)
            if current is None:
                return None
            updated = replace(current, **changes)
            self._rows[entity_id] = updated
            return updated

    def delete(self, entity_id: int) -> bool:
        with self._lock:
            return self._rows.pop(entity_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


def _stamped(fields: dict[str, Any], created_at: datetime | None) -> dict[str, Any]:
    if created_at is not None:
        fields["created_at"] = created_at
    return fields


class MemoryStore:
    """Typed CRUD over volatile in-process collections."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: Collection[User] = Collection(User, self._lock)
        self._materials: Collection[StudyMaterial] = Collection(StudyMaterial, self._lock)
        self._sessions: Collection[StudySession] = Collection(StudySession, self._lock)
        self._summaries: Collection[MaterialSummary] = Collection(MaterialSummary, self._lock)
        self._flashcards: Collection[Flashcard] = Collection(Flashcard, self._lock)
        self._conversations: Collection[Conversation] = Collection(Conversation, self._lock)
        self._badges: Collection[Badge] = Collection(Badge, self._lock)
        self._user_badges: Collection[UserBadge] = Collection(UserBadge, self._lock)

    def stats(self) -> dict[str, int]:
        """Row count per collection."""
        return {
            "users": len(self._users),
            "materials": len(self._materials),
            "sessions": len(self._sessions),
            "summaries": len(self._summaries),
            "flashcards": len(self._flashcards),
            "conversations": len(self._conversations),
            "badges": len(self._badges),
            "user_badges": len(self._user_badges),
        }

    # =========================================================================
    # Users
    # =========================================================================

    def create_user(
        self,
        *,
        username: str,
        password: str,
        name: str,
        email: str,
        created_at: datetime | None = None,
    ) -> User:
        """Create a user with level 1, 0 xp and no study time.

        Raises:
            DuplicateUsernameError: If the username is taken. Nothing is stored.
        """
        with self._lock:
            if self.get_user_by_username(username) is not None:
                raise DuplicateUsernameError(username)
            return self._users.insert(
                **_stamped(
                    {"username": username, "password": password, "name": name, "email": email},
                    created_at,
                )
            )

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        matches = self._users.filter(lambda user: user.username == username)
        return matches[0] if matches else None

    def update_user(self, user_id: int, **changes: Any) -> User | None:
        """Shallow-merge changes into a user.

        Raises:
            DuplicateUsernameError: If changes rename the user onto a taken username.
        """
        with self._lock:
            new_username = changes.get("username")
            if new_username is not None:
                holder = self.get_user_by_username(new_username)
                if holder is not None and holder.id != user_id:
                    raise DuplicateUsernameError(new_username)
            return self._users.update(user_id, **changes)

    # =========================================================================
    # Study materials
    # =========================================================================

    def create_material(
        self,
        *,
        user_id: int,
        title: str,
        file_type: str,
        file_path: str,
        description: str | None = None,
        progress: int = 0,
        last_viewed: datetime | None = None,
        created_at: datetime | None = None,
    ) -> StudyMaterial:
        return self._materials.insert(
            **_stamped(
                {
                    "user_id": user_id,
                    "title": title,
                    "file_type": file_type,
                    "file_path": file_path,
                    "description": description,
                    "progress": progress,
                    "last_viewed": last_viewed,
                },
                created_at,
            )
        )

    def get_material(self, material_id: int) -> StudyMaterial | None:
        return self._materials.get(material_id)

    def list_materials_for_user(self, user_id: int) -> list[StudyMaterial]:
        """Materials of a user, most recently viewed first; never-viewed last."""
        materials = self._materials.filter(lambda m: m.user_id == user_id)
        viewed = [m for m in materials if m.last_viewed is not None]
        never_viewed = [m for m in materials if m.last_viewed is None]
        viewed.sort(key=lambda m: m.last_viewed, reverse=True)  # type: ignore[arg-type, return-value]
        return viewed + never_viewed

    def update_material(self, material_id: int, **changes: Any) -> StudyMaterial | None:
        return self._materials.update(material_id, **changes)

    def delete_material(self, material_id: int) -> bool:
        return self._materials.delete(material_id)

    # =========================================================================
    # Study sessions
    # =========================================================================

    def create_session(
        self,
        *,
        user_id: int,
        title: str,
        subject: str,
        start_time: datetime,
        end_time: datetime,
        created_at: datetime | None = None,
    ) -> StudySession:
        """Create an incomplete study session."""
        return self._sessions.insert(
            **_stamped(
                {
                    "user_id": user_id,
                    "title": title,
                    "subject": subject,
                    "start_time": start_time,
                    "end_time": end_time,
                },
                created_at,
            )
        )

    def get_session(self, session_id: int) -> StudySession | None:
        return self._sessions.get(session_id)

    def list_sessions_for_user(self, user_id: int) -> list[StudySession]:
        """Sessions of a user by start time, earliest first."""
        sessions = self._sessions.filter(lambda s: s.user_id == user_id)
        return sorted(sessions, key=lambda s: s.start_time)

    def upcoming_sessions(self, user_id: int, now: datetime | None = None) -> list[StudySession]:
        """Incomplete sessions starting at or after now, earliest first."""
        now = now or utcnow()
        sessions = self._sessions.filter(
            lambda s: s.user_id == user_id and s.start_time >= now and not s.is_completed
        )
        return sorted(sessions, key=lambda s: s.start_time)

    def update_session(
        self,
        session_id: int,
        *,
        check: Callable[[StudySession], None] | None = None,
        **changes: Any,
    ) -> StudySession | None:
        """Shallow-merge changes into a session.

        check sees the merged row under the store lock and raises to reject
        it, in which case nothing is written.
        """
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                return None
            if check is not None:
                check(replace(current, **changes))
            return self._sessions.update(session_id, **changes)

    def delete_session(self, session_id: int) -> bool:
        return self._sessions.delete(session_id)

    # =========================================================================
    # Material summaries (append-only)
    # =========================================================================

    def create_summary(
        self,
        *,
        material_id: int,
        user_id: int,
        content: str,
        created_at: datetime | None = None,
    ) -> MaterialSummary | None:
        """Add a summary to a material, or return None if the material is gone."""
        with self._lock:
            if self._materials.get(material_id) is None:
                return None
            return self._summaries.insert(
                **_stamped(
                    {"material_id": material_id, "user_id": user_id, "content": content},
                    created_at,
                )
            )

    def get_summary(self, summary_id: int) -> MaterialSummary | None:
        return self._summaries.get(summary_id)

    def list_summaries_for_material(self, material_id: int) -> list[MaterialSummary]:
        return self._summaries.filter(lambda s: s.material_id == material_id)

    # =========================================================================
    # Flashcards
    # =========================================================================

    def create_flashcard(
        self,
        *,
        user_id: int,
        question: str,
        answer: str,
        material_id: int | None = None,
        created_at: datetime | None = None,
    ) -> Flashcard:
        return self._flashcards.insert(
            **_stamped(
                {
                    "user_id": user_id,
                    "question": question,
                    "answer": answer,
                    "material_id": material_id,
                },
                created_at,
            )
        )

    def get_flashcard(self, flashcard_id: int) -> Flashcard | None:
        return self._flashcards.get(flashcard_id)

    def list_flashcards_for_user(self, user_id: int) -> list[Flashcard]:
        return self._flashcards.filter(lambda f: f.user_id == user_id)

    def list_flashcards_for_material(self, material_id: int) -> list[Flashcard]:
        return self._flashcards.filter(lambda f: f.material_id == material_id)

    def delete_flashcard(self, flashcard_id: int) -> bool:
        return self._flashcards.delete(flashcard_id)

    # =========================================================================
    # Conversations
    # =========================================================================

    def create_conversation(
        self,
        *,
        user_id: int,
        messages: Iterable[ChatMessage] = (),
        created_at: datetime | None = None,
    ) -> Conversation:
        return self._conversations.insert(
            **_stamped({"user_id": user_id, "messages": tuple(messages)}, created_at)
        )

    def get_conversation(self, conversation_id: int) -> Conversation | None:
        return self._conversations.get(conversation_id)

    def list_conversations_for_user(self, user_id: int) -> list[Conversation]:
        """Conversations of a user, newest first."""
        conversations = self._conversations.filter(lambda c: c.user_id == user_id)
        return sorted(conversations, key=lambda c: (c.created_at, c.id), reverse=True)

    def update_conversation(
        self, conversation_id: int, messages: Sequence[ChatMessage]
    ) -> Conversation | None:
        """Replace the whole message list. Last write wins."""
        return self._conversations.update(conversation_id, messages=tuple(messages))

    def append_messages(
        self, conversation_id: int, messages: Sequence[ChatMessage]
    ) -> Conversation | None:
        """Append messages to the current list under the store lock."""
        with self._lock:
            current = self._conversations.get(conversation_id)
            if current is None:
                return None
            return self._conversations.update(
                conversation_id, messages=current.messages + tuple(messages)
            )

    def delete_conversation(self, conversation_id: int) -> bool:
        return self._conversations.delete(conversation_id)

    # =========================================================================
    # Badges
    # =========================================================================

    def create_badge(self, *, name: str, description: str, icon: str, requirement: str) -> Badge:
        return self._badges.insert(
            name=name, description=description, icon=icon, requirement=requirement
        )

    def get_badge(self, badge_id: int) -> Badge | None:
        return self._badges.get(badge_id)

    def all_badges(self) -> list[Badge]:
        return self._badges.all()

    def badges_for_user(self, user_id: int) -> list[Badge]:
        """Badges earned by a user, in catalog order."""
        with self._lock:
            earned = {ub.badge_id for ub in self._user_badges.filter(lambda ub: ub.user_id == user_id)}
            return self._badges.filter(lambda badge: badge.id in earned)

    def assign_badge(self, user_id: int, badge_id: int) -> UserBadge | None:
        """Record that a user earned a badge.

        Returns None if the user or badge is unknown. Assigning a badge the user
        already holds returns the existing membership row.
        """
        with self._lock:
            if self._users.get(user_id) is None or self._badges.get(badge_id) is None:
                return None
            existing = self._user_badges.filter(
                lambda ub: ub.user_id == user_id and ub.badge_id == badge_id
            )
            if existing:
                return existing[0]
            return self._user_badges.insert(user_id=user_id, badge_id=badge_id)
