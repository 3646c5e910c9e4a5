"""Auth routes.

Registration and credential checks only. There is no session or token:
the client keeps the returned user id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from studybuddy.api.deps import get_store
from studybuddy.responses import success_response
from studybuddy.schemas.user import LoginRequest, RegisterRequest
from studybuddy.services import users as users_service
from studybuddy.store import MemoryStore

router = APIRouter()


@router.post("/auth/register", status_code=201)
def register(
    body: RegisterRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Create an account.

    Errors:
        E_USERNAME_TAKEN (409): Username already exists.
    """
    result = users_service.register_user(store, body)
    return success_response(result.model_dump(mode="json"))


@router.post("/auth/login")
def login(
    body: LoginRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Check credentials and return the user.

    Errors:
        E_INVALID_CREDENTIALS (401): Unknown username or wrong password.
    """
    result = users_service.login(store, body)
    return success_response(result.model_dump(mode="json"))
