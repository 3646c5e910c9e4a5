"""API error codes, their HTTP statuses, and the exceptions that carry them.

Services raise ApiError subclasses; studybuddy.responses renders them as the
error envelope with the status from ERROR_CODE_TO_STATUS.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Authentication errors (401)
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"
    E_INVALID_CREDENTIALS = "E_INVALID_CREDENTIALS"

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_USER_NOT_FOUND = "E_USER_NOT_FOUND"
    E_MATERIAL_NOT_FOUND = "E_MATERIAL_NOT_FOUND"
    E_SESSION_NOT_FOUND = "E_SESSION_NOT_FOUND"
    E_FLASHCARD_NOT_FOUND = "E_FLASHCARD_NOT_FOUND"
    E_CONVERSATION_NOT_FOUND = "E_CONVERSATION_NOT_FOUND"
    E_BADGE_NOT_FOUND = "E_BADGE_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_SESSION_TIMES = "E_INVALID_SESSION_TIMES"
    E_INVALID_MATERIAL_REFERENCE = "E_INVALID_MATERIAL_REFERENCE"

    # Conflict errors (409)
    E_USERNAME_TAKEN = "E_USERNAME_TAKEN"

    # AI errors
    E_AI_UNAVAILABLE = "E_AI_UNAVAILABLE"  # 503
    E_AI_BACKEND_FAILED = "E_AI_BACKEND_FAILED"  # 502
    E_AI_MALFORMED_RESPONSE = "E_AI_MALFORMED_RESPONSE"  # 502

    # Server errors
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_INVALID_CREDENTIALS: 401,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_USER_NOT_FOUND: 404,
    ApiErrorCode.E_MATERIAL_NOT_FOUND: 404,
    ApiErrorCode.E_SESSION_NOT_FOUND: 404,
    ApiErrorCode.E_FLASHCARD_NOT_FOUND: 404,
    ApiErrorCode.E_CONVERSATION_NOT_FOUND: 404,
    ApiErrorCode.E_BADGE_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_INVALID_SESSION_TIMES: 400,
    ApiErrorCode.E_INVALID_MATERIAL_REFERENCE: 400,
    ApiErrorCode.E_USERNAME_TAKEN: 409,
    ApiErrorCode.E_AI_UNAVAILABLE: 503,
    ApiErrorCode.E_AI_BACKEND_FAILED: 502,
    ApiErrorCode.E_AI_MALFORMED_RESPONSE: 502,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """An error the API reports with its own code.

    Subclasses set default_code and default_message; status_code always
    follows ERROR_CODE_TO_STATUS for the code actually raised.
    """

    default_code: ApiErrorCode = ApiErrorCode.E_INTERNAL
    default_message: str = "Internal server error"

    def __init__(self, code: ApiErrorCode | None = None, message: str | None = None):
        self.code = code or self.default_code
        self.message = message or self.default_message
        self.status_code = ERROR_CODE_TO_STATUS.get(self.code, 500)
        super().__init__(self.message)


class NotFoundError(ApiError):
    default_code = ApiErrorCode.E_NOT_FOUND
    default_message = "Not found"


class InvalidRequestError(ApiError):
    default_code = ApiErrorCode.E_INVALID_REQUEST
    default_message = "Invalid request"


class ConflictError(ApiError):
    """Request conflicts with existing state (a taken username)."""

    default_code = ApiErrorCode.E_USERNAME_TAKEN
    default_message = "Conflict"


class UnauthenticatedError(ApiError):
    default_code = ApiErrorCode.E_UNAUTHENTICATED
    default_message = "Unauthenticated"
