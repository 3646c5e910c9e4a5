"""Flashcard routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from studybuddy.api.deps import get_store
from studybuddy.responses import success_response
from studybuddy.schemas.flashcard import CreateFlashcardRequest
from studybuddy.services import flashcards as flashcards_service
from studybuddy.store import MemoryStore

router = APIRouter()


@router.get("/users/{user_id}/flashcards")
def list_user_flashcards(
    user_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    result = flashcards_service.list_flashcards_for_user(store, user_id)
    return success_response([f.model_dump(mode="json") for f in result])


@router.get("/materials/{material_id}/flashcards")
def list_material_flashcards(
    material_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    result = flashcards_service.list_flashcards_for_material(store, material_id)
    return success_response([f.model_dump(mode="json") for f in result])


@router.post("/flashcards", status_code=201)
def create_flashcard(
    body: CreateFlashcardRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Create a hand-written flashcard.

    Errors:
        E_USER_NOT_FOUND (404): User doesn't exist.
        E_INVALID_MATERIAL_REFERENCE (400): material_id given but unknown.
    """
    result = flashcards_service.create_flashcard(store, body)
    return success_response(result.model_dump(mode="json"))


@router.delete("/flashcards/{flashcard_id}", status_code=204)
def delete_flashcard(
    flashcard_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> Response:
    flashcards_service.delete_flashcard(store, flashcard_id)
    return Response(status_code=204)
