"""Abstract base class for completion backend adapters.

Rules:
- Async adapters with a shared httpx.AsyncClient
- One adapter instance per configured service (credential and model fixed)
- No retries and no fallback inside adapters
- No logging of request/response bodies
- Raw httpx errors bubble up to the provider for classification
- Each adapter handles Turn → provider format conversion internally
"""

from abc import ABC, abstractmethod

import httpx

from studybuddy.services.llm.types import CompletionRequest, CompletionResponse, StructuredResponse

# Default per-call timeout in seconds
DEFAULT_TIMEOUT_S = 45


class BackendAdapter(ABC):
    """Uniform capability interface over one text-generation service.

    Attributes:
        name: Stable lowercase key used in logs and error classification.
        display_name: Human-facing service name reported by the status route.
    """

    name: str
    display_name: str

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str,
        model_name: str,
        timeout_s: int = DEFAULT_TIMEOUT_S,
    ):
        """Initialize adapter with shared HTTP client and service credentials.

        Args:
            client: Shared httpx.AsyncClient for connection pooling.
            api_key: The service API key.
            model_name: Model identifier sent with every request.
            timeout_s: Read timeout per request in seconds.
        """
        self._client = client
        self._api_key = api_key
        self.model_name = model_name
        self.timeout_s = timeout_s

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout_s, connect=10.0)

    @abstractmethod
    async def complete(self, req: CompletionRequest) -> CompletionResponse:
        """Free-text generation.

        Raises:
            httpx.HTTPStatusError: On non-2xx HTTP response.
            httpx.TimeoutException: On request timeout.
            httpx.NetworkError: On network failure.
            BackendInvocationError: If the response body lacks generated text.
        """

    @abstractmethod
    async def complete_json(self, req: CompletionRequest) -> StructuredResponse:
        """Generation constrained to a single JSON object.

        Raises:
            MalformedStructuredResponseError: If the output does not decode to an object.
            (plus everything complete() raises)
        """
