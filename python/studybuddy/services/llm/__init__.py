"""Completion layer for provider-agnostic text generation.

This module provides a unified interface for calling OpenAI and Gemini
models. It includes:

- Backend adapters with async support (free text + JSON object mode)
- Error classification and normalization
- Prompt rendering (provider-agnostic)
- Ordered fallback across configured backends

Usage:
    from studybuddy.services.llm import CompletionProvider, Turn

    provider = CompletionProvider.from_settings(httpx_client, settings)
    text = await provider.complete([Turn(role="user", content="Hello!")])

Rules:
- Adapters are async using httpx.AsyncClient
- No retries inside adapters
- No store access inside adapters
- No logging of request/response bodies
- Raw provider errors bubble up to the provider for classification
"""

from studybuddy.services.llm.adapter import BackendAdapter
from studybuddy.services.llm.errors import (
    BackendInvocationError,
    LLMError,
    LLMErrorClass,
    MalformedStructuredResponseError,
    ProviderUnconfiguredError,
    classify_provider_error,
)
from studybuddy.services.llm.gemini_adapter import GeminiAdapter
from studybuddy.services.llm.openai_adapter import OpenAIAdapter
from studybuddy.services.llm.prompt import (
    STUDY_BUDDY_SYSTEM_PROMPT,
    PromptTooLargeError,
    render_prompt,
    validate_prompt_size,
)
from studybuddy.services.llm.provider import CompletionProvider
from studybuddy.services.llm.types import (
    CompletionRequest,
    CompletionResponse,
    LLMUsage,
    StructuredResponse,
    Turn,
)

__all__ = [
    # Core types
    "Turn",
    "CompletionRequest",
    "CompletionResponse",
    "StructuredResponse",
    "LLMUsage",
    # Adapters
    "BackendAdapter",
    "OpenAIAdapter",
    "GeminiAdapter",
    # Provider
    "CompletionProvider",
    # Errors
    "LLMError",
    "LLMErrorClass",
    "ProviderUnconfiguredError",
    "BackendInvocationError",
    "MalformedStructuredResponseError",
    "classify_provider_error",
    # Prompt rendering
    "render_prompt",
    "validate_prompt_size",
    "PromptTooLargeError",
    "STUDY_BUDDY_SYSTEM_PROMPT",
]
