"""Study session Pydantic schemas.

Datetimes without an offset are read as UTC. Ordering of start and end is
checked by the service so that updates are checked against the merged row.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from studybuddy.schemas.common import UtcDatetime


class SessionOut(BaseModel):
    """Response schema for a study session."""

    id: int
    user_id: int
    title: str
    subject: str
    start_time: datetime
    end_time: datetime
    is_completed: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreateSessionRequest(BaseModel):
    """Request body for scheduling a session."""

    user_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=255)
    subject: str = Field(..., min_length=1, max_length=255)
    start_time: UtcDatetime
    end_time: UtcDatetime


class UpdateSessionRequest(BaseModel):
    """Request body for editing or completing a session."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    subject: str | None = Field(default=None, min_length=1, max_length=255)
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    is_completed: bool | None = None
