"""Study session routes.

IMPORTANT: /users/{user_id}/sessions/upcoming is a distinct path from
/users/{user_id}/sessions, so registration order does not matter here.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from studybuddy.api.deps import get_store
from studybuddy.responses import success_response
from studybuddy.schemas.session import CreateSessionRequest, UpdateSessionRequest
from studybuddy.services import sessions as sessions_service
from studybuddy.store import MemoryStore

router = APIRouter()


@router.get("/users/{user_id}/sessions")
def list_sessions(
    user_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """List a user's sessions by start time."""
    result = sessions_service.list_sessions(store, user_id)
    return success_response([s.model_dump(mode="json") for s in result])


@router.get("/users/{user_id}/sessions/upcoming")
def list_upcoming_sessions(
    user_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """List incomplete sessions starting now or later."""
    result = sessions_service.list_upcoming_sessions(store, user_id)
    return success_response([s.model_dump(mode="json") for s in result])


@router.post("/sessions", status_code=201)
def create_session(
    body: CreateSessionRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Schedule a study session.

    Errors:
        E_INVALID_SESSION_TIMES (400): start_time is not before end_time.
    """
    result = sessions_service.create_session(store, body)
    return success_response(result.model_dump(mode="json"))


@router.put("/sessions/{session_id}")
def update_session(
    session_id: int,
    body: UpdateSessionRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Edit a session or mark it complete.

    Errors:
        E_SESSION_NOT_FOUND (404): Session doesn't exist.
        E_INVALID_SESSION_TIMES (400): The edit would end the session before it starts.
    """
    result = sessions_service.update_session(store, session_id, body)
    return success_response(result.model_dump(mode="json"))


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(
    session_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> Response:
    sessions_service.delete_session(store, session_id)
    return Response(status_code=204)
