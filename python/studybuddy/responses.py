"""Response envelopes and the app's exception handlers.

Success bodies are {"data": ...}. Every error body, from any handler, is
{"error": {"code": "E_...", "message": "...", "request_id": "..."}} where
request_id is the one RequestIDMiddleware bound for this request.
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from studybuddy.errors import ERROR_CODE_TO_STATUS, ApiError, ApiErrorCode
from studybuddy.logging import get_logger, get_request_id
from studybuddy.services.llm.errors import (
    LLMError,
    MalformedStructuredResponseError,
    ProviderUnconfiguredError,
)
from studybuddy.services.redact import safe_kv

logger = get_logger(__name__)

# Framework HTTP errors (unknown route, wrong method) mapped onto API codes
HTTP_STATUS_CODES: dict[int, ApiErrorCode] = {
    400: ApiErrorCode.E_INVALID_REQUEST,
    401: ApiErrorCode.E_UNAUTHENTICATED,
    404: ApiErrorCode.E_NOT_FOUND,
    405: ApiErrorCode.E_INVALID_REQUEST,
    422: ApiErrorCode.E_INVALID_REQUEST,
}

# Client-facing text for backend failures; provider detail stays in the logs
LLM_CLIENT_MESSAGES: dict[ApiErrorCode, str] = {
    ApiErrorCode.E_AI_MALFORMED_RESPONSE: "AI service returned an unusable response",
    ApiErrorCode.E_AI_BACKEND_FAILED: "AI service request failed",
}


def success_response(data: Any) -> dict[str, Any]:
    return {"data": data}


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Build an error envelope.

    Args:
        code: API error code.
        message: Client-facing message.
        request_id: Defaults to the current request's ID. Omitted from the
            body when there is none (outside a request).
    """
    error: dict[str, Any] = {"code": code.value, "message": message}
    request_id = request_id or get_request_id()
    if request_id:
        error["request_id"] = request_id
    return {"error": error}


def _error_json(code: ApiErrorCode, message: str, status_code: int | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or ERROR_CODE_TO_STATUS[code],
        content=error_response(code, message),
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _error_json(exc.code, exc.message, exc.status_code)


def llm_error_code(exc: LLMError) -> ApiErrorCode:
    """API code for a completion failure that reached a route."""
    if isinstance(exc, ProviderUnconfiguredError):
        return ApiErrorCode.E_AI_UNAVAILABLE
    if isinstance(exc, MalformedStructuredResponseError):
        return ApiErrorCode.E_AI_MALFORMED_RESPONSE
    return ApiErrorCode.E_AI_BACKEND_FAILED


async def llm_error_handler(request: Request, exc: LLMError) -> JSONResponse:
    """Completion failures: 503 when unconfigured, 502 otherwise.

    Only the unconfigured message (which names the missing settings) is
    passed through; backend messages can carry provider status text.
    """
    code = llm_error_code(exc)
    logger.warning(
        "completion_error_returned",
        **safe_kv(
            api_code=code.value,
            error_class=exc.error_class.value,
            provider=exc.provider,
            fallback_attempted=exc.fallback_attempted,
            previous_error_class=exc.previous.error_class.value if exc.previous else None,
        ),
    )
    return _error_json(code, LLM_CLIENT_MESSAGES.get(code, exc.message))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Schema violations are 400 E_INVALID_REQUEST, not FastAPI's 422."""
    logger.info(
        "request_validation_failed",
        error_count=len(exc.errors()),
        locations=[".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()],
    )
    return _error_json(ApiErrorCode.E_INVALID_REQUEST, "Invalid request body")


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    code = HTTP_STATUS_CODES.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    return _error_json(code, str(exc.detail) if exc.detail else "An error occurred", exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500 E_INTERNAL; the traceback is logged, never returned."""
    logger.exception("unhandled_exception", error_type=type(exc).__name__)
    return _error_json(ApiErrorCode.E_INTERNAL, "Internal server error")
