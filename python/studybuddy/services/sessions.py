"""Study session service layer.

Start must precede end. The check runs on create and on the merged row of
an update, so moving only one end of a session is validated too. Updates
check inside the store lock, so two concurrent PUTs cannot combine into a
session that ends before it starts.
"""

from datetime import datetime

from studybuddy.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from studybuddy.logging import get_logger
from studybuddy.schemas.session import CreateSessionRequest, SessionOut, UpdateSessionRequest
from studybuddy.services.users import get_user_or_404
from studybuddy.store import MemoryStore

logger = get_logger(__name__)


def check_session_times(start_time: datetime, end_time: datetime) -> None:
    """Raise InvalidRequestError(E_INVALID_SESSION_TIMES) unless start < end."""
    if start_time >= end_time:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_SESSION_TIMES, "start_time must be before end_time"
        )


def list_sessions(store: MemoryStore, user_id: int) -> list[SessionOut]:
    """Sessions of a user by start time."""
    get_user_or_404(store, user_id)
    return [SessionOut.model_validate(s) for s in store.list_sessions_for_user(user_id)]


def list_upcoming_sessions(store: MemoryStore, user_id: int) -> list[SessionOut]:
    """Incomplete sessions that have not started yet."""
    get_user_or_404(store, user_id)
    return [SessionOut.model_validate(s) for s in store.upcoming_sessions(user_id)]


def create_session(store: MemoryStore, request: CreateSessionRequest) -> SessionOut:
    get_user_or_404(store, request.user_id)
    check_session_times(request.start_time, request.end_time)
    session = store.create_session(
        user_id=request.user_id,
        title=request.title,
        subject=request.subject,
        start_time=request.start_time,
        end_time=request.end_time,
    )
    logger.info("session_created", user_id=request.user_id, session_id=session.id)
    return SessionOut.model_validate(session)


def update_session(
    store: MemoryStore, session_id: int, request: UpdateSessionRequest
) -> SessionOut:
    """Apply the fields present in the request body.

    Raises:
        NotFoundError(E_SESSION_NOT_FOUND): If the session does not exist.
        InvalidRequestError(E_INVALID_SESSION_TIMES): If the result would end before it starts.
    """
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    session = store.update_session(
        session_id,
        check=lambda merged: check_session_times(merged.start_time, merged.end_time),
        **changes,
    )
    if session is None:
        raise NotFoundError(ApiErrorCode.E_SESSION_NOT_FOUND, "Session not found")

    if changes.get("is_completed"):
        logger.info("session_completed", session_id=session_id)
    return SessionOut.model_validate(session)


def delete_session(store: MemoryStore, session_id: int) -> None:
    if not store.delete_session(session_id):
        raise NotFoundError(ApiErrorCode.E_SESSION_NOT_FOUND, "Session not found")
