"""AI study features built on the completion provider.

- chat: one study-buddy turn, stored on a conversation
- summarize_material: free-text study note, stored as a new summary
- generate_flashcards: JSON deck, degrading to one summary card when the
  model output cannot be decoded
- generate_study_plan: JSON session list, stored as study sessions

Ordering rule: the completion call happens before any store write, so a
failed backend call leaves the store untouched.

Errors from the provider (LLMError subclasses) propagate to the app's
LLMError handler, except where a degraded result is defined below.
"""

from pydantic import ValidationError

from studybuddy.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from studybuddy.logging import get_logger
from studybuddy.schemas.ai import (
    AIStatusOut,
    ChatRequest,
    ChatResponse,
    FlashcardDeck,
    GeneratedFlashcard,
    GenerateFlashcardsRequest,
    PlannedSession,
    StudyPlan,
    StudyPlanRequest,
    SummarizeRequest,
)
from studybuddy.schemas.conversation import ConversationOut
from studybuddy.schemas.flashcard import FlashcardOut
from studybuddy.schemas.material import SummaryOut
from studybuddy.schemas.session import SessionOut
from studybuddy.services.conversations import get_conversation_or_404
from studybuddy.services.flashcards import check_material_reference
from studybuddy.services.llm import (
    CompletionProvider,
    LLMError,
    MalformedStructuredResponseError,
    Turn,
)
from studybuddy.services.llm.prompt import (
    PromptTooLargeError,
    build_flashcard_prompt,
    build_study_plan_prompt,
    build_topic_summary_prompt,
    render_prompt,
    render_summary_prompt,
    validate_prompt_size,
)
from studybuddy.services.materials import get_material_or_404
from studybuddy.services.redact import safe_kv
from studybuddy.services.users import get_user_or_404
from studybuddy.store import ChatMessage, MemoryStore

logger = get_logger(__name__)


def _checked(turns: list[Turn]) -> list[Turn]:
    try:
        validate_prompt_size(turns)
    except PromptTooLargeError as e:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, str(e)) from e
    return turns


def _was_malformed(error: LLMError) -> bool:
    """True if the failed attempt or the one before it returned undecodable output."""
    return isinstance(error, MalformedStructuredResponseError) or isinstance(
        error.previous, MalformedStructuredResponseError
    )


def get_status(provider: CompletionProvider) -> AIStatusOut:
    return AIStatusOut(
        available=provider.is_available(),
        service=provider.active_service_name(),
    )


async def chat(
    store: MemoryStore, provider: CompletionProvider, request: ChatRequest
) -> ChatResponse:
    """Answer one chat message and record the exchange.

    With conversation_id, the stored history is sent and the new pair is
    appended atomically. Without it, a new conversation is created.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): Unknown user.
        NotFoundError(E_CONVERSATION_NOT_FOUND): Unknown conversation, or one
            owned by another user.
    """
    get_user_or_404(store, request.user_id)

    history: list[Turn] = []
    if request.conversation_id is not None:
        conversation = get_conversation_or_404(store, request.conversation_id)
        if conversation.user_id != request.user_id:
            raise NotFoundError(ApiErrorCode.E_CONVERSATION_NOT_FOUND, "Conversation not found")
        history = [Turn(role=m.role, content=m.content) for m in conversation.messages]

    turns = _checked(render_prompt(request.message, history))
    reply = await provider.complete(turns)

    exchange = [
        ChatMessage(role="user", content=request.message),
        ChatMessage(role="assistant", content=reply),
    ]
    if request.conversation_id is not None:
        stored = store.append_messages(request.conversation_id, exchange)
        if stored is None:
            # Deleted while the completion was in flight
            raise NotFoundError(ApiErrorCode.E_CONVERSATION_NOT_FOUND, "Conversation not found")
    else:
        stored = store.create_conversation(user_id=request.user_id, messages=exchange)

    logger.info(
        "chat_turn_stored",
        **safe_kv(
            user_id=request.user_id,
            conversation_id=stored.id,
            history_turns=len(history),
            reply_chars=len(reply),
        ),
    )
    return ChatResponse(response=reply, conversation=ConversationOut.model_validate(stored))


async def summarize_material(
    store: MemoryStore, provider: CompletionProvider, request: SummarizeRequest
) -> SummaryOut:
    """Summarize material text and store it as a new summary row."""
    get_user_or_404(store, request.user_id)
    get_material_or_404(store, request.material_id)

    summary_text = await provider.complete(_checked(render_summary_prompt(request.content)))

    summary = store.create_summary(
        material_id=request.material_id,
        user_id=request.user_id,
        content=summary_text,
    )
    if summary is None:
        # Deleted while the completion was in flight
        raise NotFoundError(ApiErrorCode.E_MATERIAL_NOT_FOUND, "Material not found")
    logger.info(
        "material_summarized",
        **safe_kv(
            material_id=request.material_id,
            summary_id=summary.id,
            source_chars=len(request.content),
            summary_chars=len(summary_text),
        ),
    )
    return SummaryOut.model_validate(summary)


async def generate_flashcards(
    store: MemoryStore, provider: CompletionProvider, request: GenerateFlashcardsRequest
) -> list[FlashcardOut]:
    """Generate and store flashcards about a topic.

    Cards missing a question or answer are dropped. When a backend in the
    chain returned output that cannot be decoded into a deck, a single card
    holding a free-text topic summary is stored instead. Other failures
    propagate.
    """
    get_user_or_404(store, request.user_id)
    check_material_reference(store, request.material_id)

    try:
        deck = await provider.complete_json(
            build_flashcard_prompt(request.topic, request.count),
            response_model=FlashcardDeck,
        )
    except LLMError as e:
        if not _was_malformed(e):
            raise
        logger.warning(
            "flashcards_degraded",
            **safe_kv(
                user_id=request.user_id,
                error_class=e.error_class.value,
                fallback_attempted=e.fallback_attempted,
            ),
        )
        overview = await provider.complete(build_topic_summary_prompt(request.topic))
        card = store.create_flashcard(
            user_id=request.user_id,
            material_id=request.material_id,
            question=f"Key concepts about {request.topic}?",
            answer=overview or f"Information about {request.topic}",
        )
        return [FlashcardOut.model_validate(card)]

    cards: list[GeneratedFlashcard] = []
    for entry in deck.flashcards:
        try:
            cards.append(GeneratedFlashcard.model_validate(entry))
        except ValidationError:
            continue

    saved = [
        store.create_flashcard(
            user_id=request.user_id,
            material_id=request.material_id,
            question=card.question,
            answer=card.answer,
        )
        for card in cards
    ]
    logger.info(
        "flashcards_generated",
        **safe_kv(
            user_id=request.user_id,
            requested=request.count,
            received=len(deck.flashcards),
            stored=len(saved),
        ),
    )
    return [FlashcardOut.model_validate(card) for card in saved]


async def generate_study_plan(
    store: MemoryStore, provider: CompletionProvider, request: StudyPlanRequest
) -> list[SessionOut]:
    """Generate a study plan and store its sessions.

    Entries with missing fields, unparseable times, or a start that is not
    before the end are skipped. A plan that cannot be decoded at all is an
    error (MalformedStructuredResponseError).
    """
    get_user_or_404(store, request.user_id)

    plan = await provider.complete_json(
        build_study_plan_prompt(request.topics, request.duration_days, request.hours_per_day),
        response_model=StudyPlan,
    )

    planned: list[PlannedSession] = []
    for entry in plan.sessions:
        try:
            session = PlannedSession.model_validate(entry)
        except ValidationError:
            continue
        if session.start_time >= session.end_time:
            continue
        planned.append(session)

    saved = [
        store.create_session(
            user_id=request.user_id,
            title=session.title,
            subject=session.subject,
            start_time=session.start_time,
            end_time=session.end_time,
        )
        for session in planned
    ]
    logger.info(
        "study_plan_generated",
        **safe_kv(
            user_id=request.user_id,
            duration_days=request.duration_days,
            received=len(plan.sessions),
            stored=len(saved),
        ),
    )
    return [SessionOut.model_validate(session) for session in saved]
