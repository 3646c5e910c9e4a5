"""User, auth and badge Pydantic schemas.

Passwords are accepted on register/login and never serialized back out.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

MIN_PASSWORD_LENGTH = 8


# =============================================================================
# Response Schemas
# =============================================================================


class UserOut(BaseModel):
    """Response schema for a user (password omitted)."""

    id: int
    username: str
    name: str
    email: str
    level: int
    xp: int
    total_study_time: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BadgeOut(BaseModel):
    """Response schema for a catalog badge."""

    id: int
    name: str
    description: str
    icon: str
    requirement: str

    model_config = ConfigDict(from_attributes=True)


class UserBadgeOut(BaseModel):
    """Response schema for a badge earned by a user."""

    id: int
    user_id: int
    badge_id: int
    earned_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserProfileOut(UserOut):
    """User plus earned badges."""

    badges: list[BadgeOut]


# =============================================================================
# Request Schemas
# =============================================================================


class RegisterRequest(BaseModel):
    """Request body for creating an account."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=256)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)

    model_config = ConfigDict(extra="forbid")


class LoginRequest(BaseModel):
    """Request body for checking credentials."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class AssignBadgeRequest(BaseModel):
    """Request body for awarding a badge."""

    badge_id: int = Field(..., ge=1)
