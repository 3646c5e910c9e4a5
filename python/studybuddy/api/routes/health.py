"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from studybuddy.api.deps import get_store
from studybuddy.responses import success_response
from studybuddy.store import MemoryStore

router = APIRouter()


@router.get("/health")
def health_check(store: Annotated[MemoryStore, Depends(get_store)]) -> dict:
    """Liveness check endpoint.

    Returns 200 if the process is running, with row counts of the
    in-memory store.
    """
    return success_response({"status": "ok", "store": store.stats()})
