"""Entity records held by the in-memory store.

Entities are frozen dataclasses. The store swaps whole snapshots on update,
so a record handed to a caller never changes underneath it.

Field defaults here are the creation defaults:
- User: level=1, xp=0, total_study_time=0
- StudyMaterial: progress=0, description=None, last_viewed=None
- StudySession: is_completed=False
- Flashcard: material_id=None
- Conversation: messages=()
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

MessageRole = Literal["system", "user", "assistant"]


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class User:
    id: int
    username: str
    password: str
    name: str
    email: str
    level: int = 1
    xp: int = 0
    total_study_time: int = 0  # minutes
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class StudyMaterial:
    id: int
    user_id: int
    title: str
    file_type: str
    file_path: str
    description: str | None = None
    progress: int = 0  # percentage, 0..100
    last_viewed: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class StudySession:
    id: int
    user_id: int
    title: str
    subject: str
    start_time: datetime
    end_time: datetime
    is_completed: bool = False
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class MaterialSummary:
    id: int
    material_id: int
    user_id: int
    content: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class Flashcard:
    id: int
    user_id: int
    question: str
    answer: str
    material_id: int | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ChatMessage:
    role: MessageRole
    content: str


@dataclass(frozen=True)
class Conversation:
    id: int
    user_id: int
    messages: tuple[ChatMessage, ...] = ()
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class Badge:
    id: int
    name: str
    description: str
    icon: str
    requirement: str


@dataclass(frozen=True)
class UserBadge:
    id: int
    user_id: int
    badge_id: int
    earned_at: datetime = field(default_factory=utcnow)
