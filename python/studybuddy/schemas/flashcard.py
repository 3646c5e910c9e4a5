"""Flashcard Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FlashcardOut(BaseModel):
    """Response schema for a flashcard."""

    id: int
    user_id: int
    material_id: int | None
    question: str
    answer: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreateFlashcardRequest(BaseModel):
    """Request body for a hand-written flashcard."""

    user_id: int = Field(..., ge=1)
    material_id: int | None = Field(default=None, ge=1)
    question: str = Field(..., min_length=1, max_length=2000)
    answer: str = Field(..., min_length=1, max_length=10000)
