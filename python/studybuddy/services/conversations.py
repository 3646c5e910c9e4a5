"""Conversation service layer.

Conversations hold their messages inline. PUT replaces the whole list
(last write wins); the chat flow in study_assistant appends instead.

Service functions correspond 1:1 with route handlers.
"""

from studybuddy.errors import ApiErrorCode, NotFoundError
from studybuddy.logging import get_logger
from studybuddy.schemas.conversation import (
    ConversationOut,
    CreateConversationRequest,
    MessageSchema,
    UpdateConversationRequest,
)
from studybuddy.services.users import get_user_or_404
from studybuddy.store import ChatMessage, Conversation, MemoryStore

logger = get_logger(__name__)


def to_chat_messages(messages: list[MessageSchema]) -> list[ChatMessage]:
    return [ChatMessage(role=m.role, content=m.content) for m in messages]


def get_conversation_or_404(store: MemoryStore, conversation_id: int) -> Conversation:
    """Load a conversation or raise.

    Raises:
        NotFoundError(E_CONVERSATION_NOT_FOUND): If the conversation does not exist.
    """
    conversation = store.get_conversation(conversation_id)
    if conversation is None:
        raise NotFoundError(ApiErrorCode.E_CONVERSATION_NOT_FOUND, "Conversation not found")
    return conversation


def list_conversations(store: MemoryStore, user_id: int) -> list[ConversationOut]:
    """Conversations of a user, newest first."""
    get_user_or_404(store, user_id)
    return [
        ConversationOut.model_validate(c) for c in store.list_conversations_for_user(user_id)
    ]


def get_conversation(store: MemoryStore, conversation_id: int) -> ConversationOut:
    return ConversationOut.model_validate(get_conversation_or_404(store, conversation_id))


def create_conversation(store: MemoryStore, request: CreateConversationRequest) -> ConversationOut:
    get_user_or_404(store, request.user_id)
    conversation = store.create_conversation(
        user_id=request.user_id,
        messages=to_chat_messages(request.messages),
    )
    logger.info(
        "conversation_created",
        user_id=request.user_id,
        conversation_id=conversation.id,
        message_count=len(conversation.messages),
    )
    return ConversationOut.model_validate(conversation)


def replace_messages(
    store: MemoryStore, conversation_id: int, request: UpdateConversationRequest
) -> ConversationOut:
    """Replace the full message list of a conversation."""
    conversation = store.update_conversation(conversation_id, to_chat_messages(request.messages))
    if conversation is None:
        raise NotFoundError(ApiErrorCode.E_CONVERSATION_NOT_FOUND, "Conversation not found")
    return ConversationOut.model_validate(conversation)


def delete_conversation(store: MemoryStore, conversation_id: int) -> None:
    if not store.delete_conversation(conversation_id):
        raise NotFoundError(ApiErrorCode.E_CONVERSATION_NOT_FOUND, "Conversation not found")
    logger.info("conversation_deleted", conversation_id=conversation_id)
