"""AI feature routes.

These handlers are async: they await the completion provider. Provider
errors are mapped by the LLMError handler:
- no backend configured → 503 E_AI_UNAVAILABLE
- backend call failed → 502 E_AI_BACKEND_FAILED
- undecodable JSON → 502 E_AI_MALFORMED_RESPONSE
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from studybuddy.api.deps import get_completion_provider, get_store
from studybuddy.responses import success_response
from studybuddy.schemas.ai import (
    ChatRequest,
    GenerateFlashcardsRequest,
    StudyPlanRequest,
    SummarizeRequest,
)
from studybuddy.services import study_assistant
from studybuddy.services.llm import CompletionProvider
from studybuddy.store import MemoryStore

router = APIRouter()


@router.get("/ai/status")
async def ai_status(
    provider: Annotated[CompletionProvider, Depends(get_completion_provider)],
) -> dict:
    """Report whether AI features are available and which backend is first."""
    result = study_assistant.get_status(provider)
    return success_response(result.model_dump(mode="json"))


@router.post("/ai/chat")
async def chat(
    body: ChatRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
    provider: Annotated[CompletionProvider, Depends(get_completion_provider)],
) -> dict:
    """Send a chat message to the study buddy.

    Errors:
        E_USER_NOT_FOUND (404): User doesn't exist.
        E_CONVERSATION_NOT_FOUND (404): Conversation doesn't exist or is not the user's.
        E_AI_UNAVAILABLE (503): No backend configured.
        E_AI_BACKEND_FAILED (502): Every configured backend failed.
    """
    result = await study_assistant.chat(store, provider, body)
    return success_response(result.model_dump(mode="json"))


@router.post("/ai/summarize", status_code=201)
async def summarize(
    body: SummarizeRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
    provider: Annotated[CompletionProvider, Depends(get_completion_provider)],
) -> dict:
    """Summarize material text and store the summary."""
    result = await study_assistant.summarize_material(store, provider, body)
    return success_response(result.model_dump(mode="json"))


@router.post("/ai/flashcards", status_code=201)
async def generate_flashcards(
    body: GenerateFlashcardsRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
    provider: Annotated[CompletionProvider, Depends(get_completion_provider)],
) -> dict:
    """Generate flashcards about a topic.

    Falls back to a single summary card when the model's JSON is unusable.
    """
    result = await study_assistant.generate_flashcards(store, provider, body)
    return success_response([f.model_dump(mode="json") for f in result])


@router.post("/ai/study-plan", status_code=201)
async def generate_study_plan(
    body: StudyPlanRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
    provider: Annotated[CompletionProvider, Depends(get_completion_provider)],
) -> dict:
    """Generate a study plan and store its sessions.

    Errors:
        E_AI_MALFORMED_RESPONSE (502): The plan could not be decoded.
    """
    result = await study_assistant.generate_study_plan(store, provider, body)
    return success_response([s.model_dump(mode="json") for s in result])
