"""Study material and summary service layer.

Service functions correspond 1:1 with route handlers.
Summaries are append-only: every store call creates a new row, and lists
are returned newest first.
"""

from studybuddy.errors import ApiErrorCode, NotFoundError
from studybuddy.logging import get_logger
from studybuddy.schemas.material import (
    CreateMaterialRequest,
    CreateSummaryRequest,
    MaterialOut,
    SummaryOut,
    UpdateMaterialRequest,
)
from studybuddy.services.users import get_user_or_404
from studybuddy.store import MemoryStore, StudyMaterial, utcnow

logger = get_logger(__name__)


def get_material_or_404(store: MemoryStore, material_id: int) -> StudyMaterial:
    """Load a material or raise.

    Raises:
        NotFoundError(E_MATERIAL_NOT_FOUND): If the material does not exist.
    """
    material = store.get_material(material_id)
    if material is None:
        raise NotFoundError(ApiErrorCode.E_MATERIAL_NOT_FOUND, "Material not found")
    return material


def list_materials(store: MemoryStore, user_id: int) -> list[MaterialOut]:
    """Materials of a user, most recently viewed first."""
    get_user_or_404(store, user_id)
    return [MaterialOut.model_validate(m) for m in store.list_materials_for_user(user_id)]


def get_material(store: MemoryStore, material_id: int) -> MaterialOut:
    return MaterialOut.model_validate(get_material_or_404(store, material_id))


def create_material(store: MemoryStore, request: CreateMaterialRequest) -> MaterialOut:
    get_user_or_404(store, request.user_id)
    material = store.create_material(
        user_id=request.user_id,
        title=request.title,
        description=request.description,
        file_type=request.file_type,
        file_path=request.file_path,
        progress=request.progress,
    )
    logger.info("material_created", user_id=request.user_id, material_id=material.id)
    return MaterialOut.model_validate(material)


def update_material(
    store: MemoryStore, material_id: int, request: UpdateMaterialRequest
) -> MaterialOut:
    """Apply the fields present in the request body."""
    # description may be cleared with null; the other fields cannot
    changes = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key == "description"
    }
    if not changes:
        return get_material(store, material_id)

    material = store.update_material(material_id, **changes)
    if material is None:
        raise NotFoundError(ApiErrorCode.E_MATERIAL_NOT_FOUND, "Material not found")
    return MaterialOut.model_validate(material)


def mark_viewed(store: MemoryStore, material_id: int) -> MaterialOut:
    """Stamp last_viewed with the current time."""
    material = store.update_material(material_id, last_viewed=utcnow())
    if material is None:
        raise NotFoundError(ApiErrorCode.E_MATERIAL_NOT_FOUND, "Material not found")
    return MaterialOut.model_validate(material)


def delete_material(store: MemoryStore, material_id: int) -> None:
    if not store.delete_material(material_id):
        raise NotFoundError(ApiErrorCode.E_MATERIAL_NOT_FOUND, "Material not found")
    logger.info("material_deleted", material_id=material_id)


def create_summary(store: MemoryStore, request: CreateSummaryRequest) -> SummaryOut:
    """Store a summary for an existing material."""
    get_user_or_404(store, request.user_id)
    get_material_or_404(store, request.material_id)
    summary = store.create_summary(
        material_id=request.material_id,
        user_id=request.user_id,
        content=request.content,
    )
    if summary is None:
        raise NotFoundError(ApiErrorCode.E_MATERIAL_NOT_FOUND, "Material not found")
    return SummaryOut.model_validate(summary)


def list_summaries(store: MemoryStore, material_id: int) -> list[SummaryOut]:
    """Summaries of a material, newest first."""
    get_material_or_404(store, material_id)
    summaries = store.list_summaries_for_material(material_id)
    ordered = sorted(summaries, key=lambda s: (s.created_at, s.id), reverse=True)
    return [SummaryOut.model_validate(s) for s in ordered]
