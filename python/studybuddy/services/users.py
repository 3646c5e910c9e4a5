"""User, auth and badge service layer.

Service functions correspond 1:1 with route handlers.
Routes are transport-only and call exactly one service function.

Passwords are opaque strings compared as-is; this service only decides
registration conflicts and credential mismatches.
"""

from studybuddy.errors import ApiErrorCode, ConflictError, NotFoundError, UnauthenticatedError
from studybuddy.logging import get_logger, set_user_context
from studybuddy.schemas.user import (
    AssignBadgeRequest,
    BadgeOut,
    LoginRequest,
    RegisterRequest,
    UserBadgeOut,
    UserOut,
    UserProfileOut,
)
from studybuddy.services.redact import describe_text, safe_kv
from studybuddy.store import DuplicateUsernameError, MemoryStore, User

logger = get_logger(__name__)


def get_user_or_404(store: MemoryStore, user_id: int) -> User:
    """Load a user or raise, and tag subsequent log entries with its id.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): If the user does not exist.
    """
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")
    set_user_context(user.id)
    return user


def register_user(store: MemoryStore, request: RegisterRequest) -> UserOut:
    """Create an account.

    Raises:
        ConflictError(E_USERNAME_TAKEN): If the username already exists.
    """
    try:
        user = store.create_user(
            username=request.username,
            password=request.password,
            name=request.name,
            email=request.email,
        )
    except DuplicateUsernameError:
        logger.info(
            "user_register_conflict",
            **safe_kv(**describe_text("username", request.username)),
        )
        raise ConflictError(ApiErrorCode.E_USERNAME_TAKEN, "Username already exists") from None

    logger.info("user_registered", user_id=user.id)
    return UserOut.model_validate(user)


def login(store: MemoryStore, request: LoginRequest) -> UserOut:
    """Check credentials and return the user.

    Unknown username and wrong password produce the same error.

    Raises:
        UnauthenticatedError(E_INVALID_CREDENTIALS): If credentials do not match.
    """
    user = store.get_user_by_username(request.username)
    if user is None or user.password != request.password:
        logger.info(
            "user_login_failed",
            **safe_kv(**describe_text("username", request.username)),
        )
        raise UnauthenticatedError(ApiErrorCode.E_INVALID_CREDENTIALS, "Invalid credentials")

    logger.info("user_logged_in", user_id=user.id)
    return UserOut.model_validate(user)


def get_user_profile(store: MemoryStore, user_id: int) -> UserProfileOut:
    """User with earned badges."""
    user = get_user_or_404(store, user_id)
    badges = [BadgeOut.model_validate(badge) for badge in store.badges_for_user(user.id)]
    return UserProfileOut(**UserOut.model_validate(user).model_dump(), badges=badges)


def list_badges(store: MemoryStore) -> list[BadgeOut]:
    return [BadgeOut.model_validate(badge) for badge in store.all_badges()]


def assign_badge(store: MemoryStore, user_id: int, request: AssignBadgeRequest) -> UserBadgeOut:
    """Award a badge. Awarding a held badge returns the existing row.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): If the user does not exist.
        NotFoundError(E_BADGE_NOT_FOUND): If the badge does not exist.
    """
    get_user_or_404(store, user_id)
    if store.get_badge(request.badge_id) is None:
        raise NotFoundError(ApiErrorCode.E_BADGE_NOT_FOUND, "Badge not found")

    user_badge = store.assign_badge(user_id, request.badge_id)
    if user_badge is None:
        # User or badge removed between the checks and the write
        raise NotFoundError(ApiErrorCode.E_NOT_FOUND, "User or badge not found")

    logger.info("badge_assigned", user_id=user_id, badge_id=request.badge_id)
    return UserBadgeOut.model_validate(user_badge)
