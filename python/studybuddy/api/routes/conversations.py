"""Conversation routes.

Route handlers for conversation CRUD. Chat turns go through /ai/chat.

Response envelope: {"data": ...}
Error envelope: {"error": {"code": "...", "message": "...", "request_id": "..."}}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from studybuddy.api.deps import get_store
from studybuddy.responses import success_response
from studybuddy.schemas.conversation import CreateConversationRequest, UpdateConversationRequest
from studybuddy.services import conversations as conversations_service
from studybuddy.store import MemoryStore

router = APIRouter(tags=["conversations"])


@router.get("/users/{user_id}/conversations")
def list_conversations(
    user_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """List a user's conversations, newest first."""
    result = conversations_service.list_conversations(store, user_id)
    return success_response([c.model_dump(mode="json") for c in result])


@router.get("/conversations/{conversation_id}")
def get_conversation(
    conversation_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Get a conversation by ID.

    Errors:
        E_CONVERSATION_NOT_FOUND (404): Conversation doesn't exist.
    """
    result = conversations_service.get_conversation(store, conversation_id)
    return success_response(result.model_dump(mode="json"))


@router.post("/conversations", status_code=201)
def create_conversation(
    body: CreateConversationRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Create a conversation, optionally with initial messages."""
    result = conversations_service.create_conversation(store, body)
    return success_response(result.model_dump(mode="json"))


@router.put("/conversations/{conversation_id}")
def replace_conversation_messages(
    conversation_id: int,
    body: UpdateConversationRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Replace the conversation's full message list (last write wins)."""
    result = conversations_service.replace_messages(store, conversation_id, body)
    return success_response(result.model_dump(mode="json"))


@router.delete("/conversations/{conversation_id}", status_code=204)
def delete_conversation(
    conversation_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> Response:
    conversations_service.delete_conversation(store, conversation_id)
    return Response(status_code=204)
