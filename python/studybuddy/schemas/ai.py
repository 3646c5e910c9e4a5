"""AI feature Pydantic schemas.

Request bodies for the AI routes, plus the shapes the completion backends
are asked to return in JSON mode:
- FlashcardDeck: {"flashcards": [{"question", "answer"}, ...]}
- StudyPlan: {"sessions": [{"title", "subject", "startTime", "endTime"}, ...]}

Deck and plan entries are kept loose at the top level and validated one by
one, so a single bad entry is skipped instead of failing the whole response.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from studybuddy.schemas.common import UtcDatetime
from studybuddy.schemas.conversation import MAX_MESSAGE_CONTENT_LENGTH, ConversationOut

MIN_FLASHCARD_COUNT = 1
MAX_FLASHCARD_COUNT = 20
MAX_PLAN_DAYS = 60
MAX_HOURS_PER_DAY = 16


# =============================================================================
# Request Schemas
# =============================================================================


class ChatRequest(BaseModel):
    """Request body for a study-buddy chat turn."""

    user_id: int = Field(..., ge=1)
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_CONTENT_LENGTH)
    conversation_id: int | None = Field(default=None, ge=1)


class SummarizeRequest(BaseModel):
    """Request body for summarizing material text."""

    user_id: int = Field(..., ge=1)
    material_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1)


class GenerateFlashcardsRequest(BaseModel):
    """Request body for AI flashcard generation."""

    user_id: int = Field(..., ge=1)
    material_id: int | None = Field(default=None, ge=1)
    topic: str = Field(..., min_length=1, max_length=500)
    count: int = Field(default=5, ge=MIN_FLASHCARD_COUNT, le=MAX_FLASHCARD_COUNT)


class StudyPlanRequest(BaseModel):
    """Request body for AI study-plan generation."""

    user_id: int = Field(..., ge=1)
    topics: list[str] = Field(..., min_length=1)
    duration_days: int = Field(..., ge=1, le=MAX_PLAN_DAYS)
    hours_per_day: float = Field(..., gt=0, le=MAX_HOURS_PER_DAY)

    @model_validator(mode="after")
    def strip_blank_topics(self) -> "StudyPlanRequest":
        topics = [topic.strip() for topic in self.topics if topic.strip()]
        if not topics:
            raise ValueError("topics must contain at least one non-blank topic")
        self.topics = topics
        return self


# =============================================================================
# Response Schemas
# =============================================================================


class ChatResponse(BaseModel):
    """Assistant reply plus the conversation it was stored in."""

    response: str
    conversation: ConversationOut


class AIStatusOut(BaseModel):
    """Which completion backend would serve the next request."""

    available: bool
    service: str


# =============================================================================
# Backend JSON Shapes
# =============================================================================


class GeneratedFlashcard(BaseModel):
    """One card as returned by the model."""

    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class FlashcardDeck(BaseModel):
    """Top-level flashcard response; entries are validated individually."""

    flashcards: list[Any]


class PlannedSession(BaseModel):
    """One session as returned by the model (camelCase keys on the wire)."""

    title: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    start_time: UtcDatetime = Field(..., alias="startTime")
    end_time: UtcDatetime = Field(..., alias="endTime")

    model_config = ConfigDict(populate_by_name=True)


class StudyPlan(BaseModel):
    """Top-level study-plan response; entries are validated individually."""

    sessions: list[Any]
