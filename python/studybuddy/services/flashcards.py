"""Flashcard service layer.

A flashcard may be global (no material) or tied to a material; a given
material_id must reference an existing material.
"""

from studybuddy.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from studybuddy.logging import get_logger
from studybuddy.schemas.flashcard import CreateFlashcardRequest, FlashcardOut
from studybuddy.services.materials import get_material_or_404
from studybuddy.services.users import get_user_or_404
from studybuddy.store import MemoryStore

logger = get_logger(__name__)


def check_material_reference(store: MemoryStore, material_id: int | None) -> None:
    """Raise InvalidRequestError(E_INVALID_MATERIAL_REFERENCE) for a dangling id."""
    if material_id is not None and store.get_material(material_id) is None:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_MATERIAL_REFERENCE, "material_id does not reference a material"
        )


def list_flashcards_for_user(store: MemoryStore, user_id: int) -> list[FlashcardOut]:
    get_user_or_404(store, user_id)
    return [FlashcardOut.model_validate(f) for f in store.list_flashcards_for_user(user_id)]


def list_flashcards_for_material(store: MemoryStore, material_id: int) -> list[FlashcardOut]:
    get_material_or_404(store, material_id)
    return [FlashcardOut.model_validate(f) for f in store.list_flashcards_for_material(material_id)]


def create_flashcard(store: MemoryStore, request: CreateFlashcardRequest) -> FlashcardOut:
    get_user_or_404(store, request.user_id)
    check_material_reference(store, request.material_id)
    flashcard = store.create_flashcard(
        user_id=request.user_id,
        material_id=request.material_id,
        question=request.question,
        answer=request.answer,
    )
    return FlashcardOut.model_validate(flashcard)


def delete_flashcard(store: MemoryStore, flashcard_id: int) -> None:
    if not store.delete_flashcard(flashcard_id):
        raise NotFoundError(ApiErrorCode.E_FLASHCARD_NOT_FOUND, "Flashcard not found")
