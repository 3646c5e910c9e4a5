"""Conversation and chat message Pydantic schemas.

Messages are stored inline on the conversation as an ordered list of
{role, content} pairs.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Valid message roles
MESSAGE_ROLES = Literal["user", "assistant", "system"]

MAX_MESSAGE_CONTENT_LENGTH = 20000


class MessageSchema(BaseModel):
    """One chat message, used both in requests and responses."""

    role: MESSAGE_ROLES
    content: str = Field(..., max_length=MAX_MESSAGE_CONTENT_LENGTH)

    model_config = ConfigDict(from_attributes=True)


class ConversationOut(BaseModel):
    """Response schema for a conversation with its messages."""

    id: int
    user_id: int
    messages: list[MessageSchema]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreateConversationRequest(BaseModel):
    """Request body for creating a conversation."""

    user_id: int = Field(..., ge=1)
    messages: list[MessageSchema] = Field(default_factory=list)


class UpdateConversationRequest(BaseModel):
    """Request body replacing a conversation's whole message list."""

    messages: list[MessageSchema]
