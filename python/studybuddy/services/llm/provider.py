"""Completion provider: ordered backend adapters with one fallback hop.

- Holds the configured adapters in priority order (OpenAI, then Gemini)
- Tries each adapter in turn; the first success wins
- Normalizes every failure into an LLMError (one place, not per adapter)
- Never retries the same backend

Observability:
- Emits completion.request.started / completion.request.finished /
  completion.request.failed per attempt and completion.fallback per hop
- All events use safe_kv() to prevent sensitive data leakage

Error handling:
- No adapters → ProviderUnconfiguredError
- Timeout → E_LLM_TIMEOUT
- Provider HTTP status → classify_provider_error
- Network error → E_LLM_PROVIDER_DOWN
- Undecodable JSON / response_model mismatch → MalformedStructuredResponseError
- Cancellation propagates untouched
"""

import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from studybuddy.config import Settings
from studybuddy.logging import get_logger
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
from studybuddy.services.llm.types import (
    CompletionMode,
    CompletionRequest,
    Turn,
)
from studybuddy.services.redact import safe_kv

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

NO_SERVICE_NAME = "None"


class CompletionProvider:
    """Routes completion requests across the configured backends.

    Handles:
    - Availability reporting for the status endpoint
    - Backend ordering with a single fallback hop
    - Error normalization across all backends
    - Observability event emission
    """

    def __init__(
        self,
        adapters: list[BackendAdapter],
        *,
        max_tokens: int,
        temperature: float | None = None,
    ):
        """Initialize provider with an ordered adapter list.

        Args:
            adapters: Configured adapters, highest priority first.
            max_tokens: Completion token cap for every request.
            temperature: Sampling temperature, None uses provider defaults.
        """
        self._adapters = list(adapters)
        self._max_tokens = max_tokens
        self._temperature = temperature

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, settings: Settings) -> "CompletionProvider":
        """Build the provider from configured credentials.

        OpenAI is added first when its key is set, Gemini second. With no key
        the provider is empty and reports itself unavailable.
        """
        adapters: list[BackendAdapter] = []
        if settings.enable_openai:
            adapters.append(
                OpenAIAdapter(
                    client,
                    api_key=settings.openai_api_key,
                    model_name=settings.openai_model,
                    timeout_s=settings.llm_timeout_s,
                )
            )
        if settings.enable_gemini:
            adapters.append(
                GeminiAdapter(
                    client,
                    api_key=settings.gemini_api_key,
                    model_name=settings.gemini_model,
                    timeout_s=settings.llm_timeout_s,
                )
            )

        logger.info(
            "completion.provider.configured",
            backends=[adapter.name for adapter in adapters],
        )
        return cls(adapters, max_tokens=settings.llm_max_tokens)

    @property
    def adapters(self) -> tuple[BackendAdapter, ...]:
        return tuple(self._adapters)

    def is_available(self) -> bool:
        """True if at least one backend is configured."""
        return bool(self._adapters)

    def active_service_name(self) -> str:
        """Display name of the backend that will be tried first."""
        if not self._adapters:
            return NO_SERVICE_NAME
        return self._adapters[0].display_name

    async def complete(self, messages: list[Turn]) -> str:
        """Free-text completion with fallback.

        Raises:
            ProviderUnconfiguredError: If no backend is configured.
            LLMError: The final attempt's error when every backend failed.
        """
        response = await self._run(messages, CompletionMode.TEXT, None)
        return response.text

    async def complete_json(
        self,
        messages: list[Turn],
        response_model: type[ModelT] | None = None,
    ) -> dict[str, Any] | ModelT:
        """JSON-object completion with fallback.

        Args:
            messages: Conversation turns, system turn first if present.
            response_model: Optional pydantic model the object must satisfy.
                A mismatch counts as a failed attempt.

        Returns:
            The decoded object, or a validated response_model instance.
        """
        return await self._run(messages, CompletionMode.JSON, response_model)

    async def _run(
        self,
        messages: list[Turn],
        mode: CompletionMode,
        response_model: type[BaseModel] | None,
    ) -> Any:
        if not self._adapters:
            raise ProviderUnconfiguredError()

        req = CompletionRequest(
            messages=list(messages),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        failures: list[LLMError] = []
        for adapter in self._adapters:
            if failures:
                logger.warning(
                    "completion.fallback",
                    **safe_kv(
                        from_backend=failures[-1].provider,
                        to_backend=adapter.name,
                        error_class=failures[-1].error_class.value,
                        mode=mode.value,
                    ),
                )
            try:
                return await self._attempt(adapter, req, mode, response_model)
            except LLMError as e:
                failures.append(e)

        final = failures[-1]
        if len(failures) > 1:
            final.fallback_attempted = True
            final.previous = failures[0]
        raise final

    async def _attempt(
        self,
        adapter: BackendAdapter,
        req: CompletionRequest,
        mode: CompletionMode,
        response_model: type[BaseModel] | None,
    ) -> Any:
        """One backend call with error normalization and logging."""
        provider = adapter.name
        base = {
            "provider": provider,
            "model_name": adapter.model_name,
            "mode": mode.value,
        }

        logger.info(
            "completion.request.started",
            **safe_kv(
                **base,
                message_chars=sum(len(turn.content) for turn in req.messages),
                num_turns=len(req.messages),
            ),
        )

        start = time.monotonic()

        try:
            if mode is CompletionMode.JSON:
                response = await adapter.complete_json(req)
                result: Any = response.data
                if response_model is not None:
                    result = response_model.model_validate(response.data)
            else:
                response = await adapter.complete(req)
                result = response

        except httpx.TimeoutException as e:
            self._log_failure(base, LLMErrorClass.TIMEOUT, start)
            raise BackendInvocationError(
                LLMErrorClass.TIMEOUT,
                "Request timed out",
                provider=provider,
            ) from e

        except httpx.HTTPStatusError as e:
            json_body = self._safe_parse_json(e.response)
            error_class = classify_provider_error(provider, e.response.status_code, json_body, None)
            self._log_failure(
                base,
                error_class,
                start,
                status_code=e.response.status_code,
                provider_request_id=e.response.headers.get("x-request-id"),
            )
            raise BackendInvocationError(
                error_class,
                f"Provider returned HTTP {e.response.status_code}",
                provider=provider,
            ) from e

        except httpx.NetworkError as e:
            self._log_failure(base, LLMErrorClass.PROVIDER_DOWN, start)
            raise BackendInvocationError(
                LLMErrorClass.PROVIDER_DOWN,
                "Network error",
                provider=provider,
            ) from e

        except ValidationError as e:
            self._log_failure(base, LLMErrorClass.MALFORMED_RESPONSE, start)
            raise MalformedStructuredResponseError(
                f"Response did not match {response_model.__name__}",
                provider=provider,
            ) from e

        except LLMError as e:
            # Adapter already produced a normalized error (missing choices, bad JSON)
            self._log_failure(base, e.error_class, start)
            raise

        except Exception as e:
            self._log_failure(base, LLMErrorClass.PROVIDER_DOWN, start)
            raise BackendInvocationError(
                LLMErrorClass.PROVIDER_DOWN,
                f"Unexpected error: {type(e).__name__}",
                provider=provider,
            ) from e

        latency_ms = int((time.monotonic() - start) * 1000)
        usage = response.usage
        logger.info(
            "completion.request.finished",
            **safe_kv(
                **base,
                outcome="success",
                latency_ms=latency_ms,
                tokens_input=usage.prompt_tokens if usage else None,
                tokens_output=usage.completion_tokens if usage else None,
                tokens_total=usage.total_tokens if usage else None,
                provider_request_id=response.provider_request_id,
            ),
        )
        return result

    def _log_failure(
        self,
        base: dict,
        error_class: LLMErrorClass,
        start: float,
        **extra,
    ) -> None:
        logger.error(
            "completion.request.failed",
            **safe_kv(
                **base,
                **extra,
                outcome="error",
                error_class=error_class.value,
                latency_ms=int((time.monotonic() - start) * 1000),
            ),
        )

    def _safe_parse_json(self, response: httpx.Response) -> dict | None:
        """Safely parse JSON from response, returning None on failure."""
        try:
            return response.json()
        except ValueError:
            return None

