"""Errors raised by the completion layer.

Everything the provider raises is an LLMError:
- ProviderUnconfiguredError: no backend has a credential
- BackendInvocationError: a backend call failed; error_class says how
- MalformedStructuredResponseError: JSON mode got no usable object

When the last backend fails after a fallback hop, its error is raised with
fallback_attempted set and the first backend's error on previous.

The HTTP layer maps these to E_AI_UNAVAILABLE (503), E_AI_MALFORMED_RESPONSE
(502) and E_AI_BACKEND_FAILED (502); see studybuddy.responses.
"""

from enum import Enum

import httpx

from studybuddy.logging import get_logger

logger = get_logger(__name__)


class LLMErrorClass(str, Enum):
    """Normalized failure classes, shared by every backend."""

    INVALID_KEY = "E_LLM_INVALID_KEY"
    RATE_LIMIT = "E_LLM_RATE_LIMIT"
    CONTEXT_TOO_LARGE = "E_LLM_CONTEXT_TOO_LARGE"
    TIMEOUT = "E_LLM_TIMEOUT"
    PROVIDER_DOWN = "E_LLM_PROVIDER_DOWN"
    MODEL_NOT_AVAILABLE = "E_MODEL_NOT_AVAILABLE"
    NOT_CONFIGURED = "E_LLM_NOT_CONFIGURED"
    MALFORMED_RESPONSE = "E_LLM_MALFORMED_RESPONSE"


class LLMError(Exception):
    """Base completion failure.

    Attributes:
        error_class: Normalized classification.
        message: Diagnostic message. May name provider status codes, so it
            is logged but not returned to API clients.
        provider: Backend name ("openai", "gemini"), None when no backend ran.
        fallback_attempted: Another backend failed before this one.
        previous: That other backend's error.
    """

    def __init__(
        self,
        error_class: LLMErrorClass,
        message: str,
        provider: str | None = None,
    ):
        self.error_class = error_class
        self.message = message
        self.provider = provider
        self.fallback_attempted = False
        self.previous: LLMError | None = None
        super().__init__(message)


class ProviderUnconfiguredError(LLMError):
    def __init__(
        self,
        message: str = "No AI service available. Configure either OPENAI_API_KEY or GEMINI_API_KEY.",
    ):
        super().__init__(LLMErrorClass.NOT_CONFIGURED, message)


class BackendInvocationError(LLMError):
    """A configured backend failed to produce a completion."""


class MalformedStructuredResponseError(LLMError):
    def __init__(self, message: str, provider: str | None = None):
        super().__init__(LLMErrorClass.MALFORMED_RESPONSE, message, provider=provider)


STATUS_CLASSES: dict[int, LLMErrorClass] = {
    401: LLMErrorClass.INVALID_KEY,
    403: LLMErrorClass.INVALID_KEY,
    404: LLMErrorClass.MODEL_NOT_AVAILABLE,
    429: LLMErrorClass.RATE_LIMIT,
}

# Lowercased substrings of the error body, checked in order before the status
BODY_MARKERS: dict[str, tuple[tuple[str, LLMErrorClass], ...]] = {
    "openai": (
        ("context_length_exceeded", LLMErrorClass.CONTEXT_TOO_LARGE),
        ("maximum context length", LLMErrorClass.CONTEXT_TOO_LARGE),
        ("model_not_found", LLMErrorClass.MODEL_NOT_AVAILABLE),
    ),
    "gemini": (
        ("api_key_invalid", LLMErrorClass.INVALID_KEY),
        ("resource_exhausted", LLMErrorClass.RATE_LIMIT),
        ("exceeds the maximum", LLMErrorClass.CONTEXT_TOO_LARGE),
        ("model not found", LLMErrorClass.MODEL_NOT_AVAILABLE),
    ),
}


def classify_provider_error(
    provider: str,
    status_code: int | None,
    json_body: dict | None,
    exception: Exception | None,
) -> LLMErrorClass:
    """Map a failed backend call to an LLMErrorClass.

    Transport failures (timeouts, connection errors) are classified from the
    exception. HTTP failures use the backend's body markers first, then the
    status code. 5xx, unknown statuses and unknown providers are PROVIDER_DOWN.
    """
    if isinstance(exception, httpx.TimeoutException):
        return LLMErrorClass.TIMEOUT
    if status_code is None:
        return LLMErrorClass.PROVIDER_DOWN

    markers = BODY_MARKERS.get(provider)
    if markers is None:
        logger.warning("unknown_provider_for_error_classification", provider=provider)
        return LLMErrorClass.PROVIDER_DOWN
    if status_code >= 500:
        return LLMErrorClass.PROVIDER_DOWN

    body = str(json_body).lower() if json_body else ""
    for marker, error_class in markers:
        if marker in body:
            return error_class

    return STATUS_CLASSES.get(status_code, LLMErrorClass.PROVIDER_DOWN)
