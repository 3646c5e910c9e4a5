"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from studybuddy.schemas.ai import (
    AIStatusOut,
    ChatRequest,
    ChatResponse,
    FlashcardDeck,
    GeneratedFlashcard,
    GenerateFlashcardsRequest,
    PlannedSession,
    StudyPlan,
    StudyPlanRequest,
    SummarizeRequest,
)
from studybuddy.schemas.conversation import (
    ConversationOut,
    CreateConversationRequest,
    MessageSchema,
    UpdateConversationRequest,
)
from studybuddy.schemas.flashcard import CreateFlashcardRequest, FlashcardOut
from studybuddy.schemas.material import (
    CreateMaterialRequest,
    CreateSummaryRequest,
    MaterialOut,
    SummaryOut,
    UpdateMaterialRequest,
)
from studybuddy.schemas.session import CreateSessionRequest, SessionOut, UpdateSessionRequest
from studybuddy.schemas.user import (
    AssignBadgeRequest,
    BadgeOut,
    LoginRequest,
    RegisterRequest,
    UserBadgeOut,
    UserOut,
    UserProfileOut,
)

__all__ = [
    # AI
    "AIStatusOut",
    "ChatRequest",
    "ChatResponse",
    "FlashcardDeck",
    "GeneratedFlashcard",
    "GenerateFlashcardsRequest",
    "PlannedSession",
    "StudyPlan",
    "StudyPlanRequest",
    "SummarizeRequest",
    # Conversations
    "ConversationOut",
    "CreateConversationRequest",
    "MessageSchema",
    "UpdateConversationRequest",
    # Flashcards
    "CreateFlashcardRequest",
    "FlashcardOut",
    # Materials and summaries
    "CreateMaterialRequest",
    "CreateSummaryRequest",
    "MaterialOut",
    "SummaryOut",
    "UpdateMaterialRequest",
    # Sessions
    "CreateSessionRequest",
    "SessionOut",
    "UpdateSessionRequest",
    # Users, auth, badges
    "AssignBadgeRequest",
    "BadgeOut",
    "LoginRequest",
    "RegisterRequest",
    "UserBadgeOut",
    "UserOut",
    "UserProfileOut",
]
