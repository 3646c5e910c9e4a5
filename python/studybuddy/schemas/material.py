"""Study material and summary Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from studybuddy.schemas.common import UtcDatetime

MAX_TITLE_LENGTH = 255
MAX_SUMMARY_SOURCE_CHARS = 100_000


# =============================================================================
# Response Schemas
# =============================================================================


class MaterialOut(BaseModel):
    """Response schema for a study material."""

    id: int
    user_id: int
    title: str
    description: str | None
    file_type: str
    file_path: str
    progress: int
    last_viewed: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SummaryOut(BaseModel):
    """Response schema for a material summary."""

    id: int
    material_id: int
    user_id: int
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Request Schemas
# =============================================================================


class CreateMaterialRequest(BaseModel):
    """Request body for registering an uploaded material."""

    user_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(default=None, max_length=2000)
    file_type: str = Field(default="pdf", min_length=1, max_length=32)
    file_path: str = Field(..., min_length=1, max_length=1024)
    progress: int = Field(default=0, ge=0, le=100)


class UpdateMaterialRequest(BaseModel):
    """Request body for editing a material.

    Only fields present in the body are changed.
    """

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(default=None, max_length=2000)
    progress: int | None = Field(default=None, ge=0, le=100)
    last_viewed: UtcDatetime | None = None


class CreateSummaryRequest(BaseModel):
    """Request body for storing a summary written elsewhere."""

    user_id: int = Field(..., ge=1)
    material_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1, max_length=MAX_SUMMARY_SOURCE_CHARS)
