"""Study material and summary routes.

Routes are transport-only:
- Validate the body with a request schema
- Call exactly one service function
- Return success(...) or raise ApiError
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from studybuddy.api.deps import get_store
from studybuddy.responses import success_response
from studybuddy.schemas.material import (
    CreateMaterialRequest,
    CreateSummaryRequest,
    UpdateMaterialRequest,
)
from studybuddy.services import materials as materials_service
from studybuddy.store import MemoryStore

router = APIRouter()


# =============================================================================
# Materials
# =============================================================================


@router.get("/users/{user_id}/materials")
def list_materials(
    user_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """List a user's materials, most recently viewed first."""
    result = materials_service.list_materials(store, user_id)
    return success_response([m.model_dump(mode="json") for m in result])


@router.get("/materials/{material_id}")
def get_material(
    material_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Get a material.

    Errors:
        E_MATERIAL_NOT_FOUND (404): Material doesn't exist.
    """
    result = materials_service.get_material(store, material_id)
    return success_response(result.model_dump(mode="json"))


@router.post("/materials", status_code=201)
def create_material(
    body: CreateMaterialRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Register an uploaded material."""
    result = materials_service.create_material(store, body)
    return success_response(result.model_dump(mode="json"))


@router.put("/materials/{material_id}")
def update_material(
    material_id: int,
    body: UpdateMaterialRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Update title, description, progress or last_viewed."""
    result = materials_service.update_material(store, material_id, body)
    return success_response(result.model_dump(mode="json"))


@router.post("/materials/{material_id}/view")
def mark_material_viewed(
    material_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Record that the material was opened now."""
    result = materials_service.mark_viewed(store, material_id)
    return success_response(result.model_dump(mode="json"))


@router.delete("/materials/{material_id}", status_code=204)
def delete_material(
    material_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> Response:
    """Delete a material.

    Errors:
        E_MATERIAL_NOT_FOUND (404): Material doesn't exist.
    """
    materials_service.delete_material(store, material_id)
    return Response(status_code=204)


# =============================================================================
# Summaries
# =============================================================================


@router.post("/summaries", status_code=201)
def create_summary(
    body: CreateSummaryRequest,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """Store a summary for a material."""
    result = materials_service.create_summary(store, body)
    return success_response(result.model_dump(mode="json"))


@router.get("/materials/{material_id}/summaries")
def list_summaries(
    material_id: int,
    store: Annotated[MemoryStore, Depends(get_store)],
) -> dict:
    """List a material's summaries, newest first."""
    result = materials_service.list_summaries(store, material_id)
    return success_response([s.model_dump(mode="json") for s in result])
