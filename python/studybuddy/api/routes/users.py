"""User profile and badge routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from studybuddy.api.deps import get_store
from studybuddy.responses import success_response
from studybuddy.schemas.user import AssignBadgeRequest
from studybuddy.services import users as users_service
from studybuddy.store import MemoryStore

router = APIRouter()


@router.get("/users/{user_id}")
def get_user(
    user_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Get a user with earned badges.

    Errors:
        E_USER_NOT_FOUND (404): User doesn't exist.
    """
    result = users_service.get_user_profile(store, user_id)
    return success_response(result.model_dump(mode="json"))


@router.get("/badges")
def list_badges(store: Annotated[MemoryStore, Depends(get_store)]) -> dict:
    """List the badge catalog."""
    result = users_service.list_badges(store)
    return success_response([b.model_dump(mode="json") for b in result])


@router.post("/users/{user_id}/badges", status_code=201)
def assign_badge(
    user_id: int,
    body: AssignBadgeRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Award a badge to a user. Idempotent.

    Errors:
        E_USER_NOT_FOUND (404): User doesn't exist.
        E_BADGE_NOT_FOUND (404): Badge doesn't exist.
    """
    result = users_service.assign_badge(store, user_id, body)
    return success_response(result.model_dump(mode="json"))
