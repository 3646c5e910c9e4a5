"""OpenAI chat completions backend (tried first).

POST https://api.openai.com/v1/chat/completions with a Bearer key. Turn
roles are OpenAI's own, so messages go out unchanged. JSON mode sets
response_format {"type": "json_object"} and decodes the reply strictly.

The provider request ID comes from the x-request-id response header, or the
body's id when the header is missing.
"""

import httpx

from studybuddy.services.llm.adapter import BackendAdapter
from studybuddy.services.llm.errors import BackendInvocationError, LLMErrorClass
from studybuddy.services.llm.structured import decode_json_object
from studybuddy.services.llm.types import (
    CompletionRequest,
    CompletionResponse,
    LLMUsage,
    StructuredResponse,
)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

JSON_OBJECT_FORMAT = {"type": "json_object"}


class OpenAIAdapter(BackendAdapter):
    name = "openai"
    display_name = "OpenAI"

    async def complete(self, req: CompletionRequest) -> CompletionResponse:
        return await self._chat(req, json_mode=False)

    async def complete_json(self, req: CompletionRequest) -> StructuredResponse:
        response = await self._chat(req, json_mode=True)
        return StructuredResponse(
            data=decode_json_object(response.text, provider=self.name),
            usage=response.usage,
            provider_request_id=response.provider_request_id,
        )

    async def _chat(self, req: CompletionRequest, *, json_mode: bool) -> CompletionResponse:
        body: dict = {
            "model": self.model_name,
            "messages": [{"role": turn.role, "content": turn.content} for turn in req.messages],
            "max_tokens": req.max_tokens,
        }
        if req.temperature is not None:
            body["temperature"] = req.temperature
        if json_mode:
            body["response_format"] = JSON_OBJECT_FORMAT

        response = await self._client.post(
            OPENAI_CHAT_URL,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            json=body,
            timeout=self._timeout(),
        )
        response.raise_for_status()
        return self._parse(response.json(), response.headers)

    def _parse(self, data: dict, headers: httpx.Headers) -> CompletionResponse:
        choices = data.get("choices") or []
        if not choices:
            raise BackendInvocationError(
                LLMErrorClass.PROVIDER_DOWN,
                "OpenAI response missing choices",
                provider=self.name,
            )

        message = choices[0].get("message") or {}
        return CompletionResponse(
            text=message.get("content") or "",
            usage=LLMUsage.from_payload(
                data.get("usage"),
                prompt_key="prompt_tokens",
                completion_key="completion_tokens",
                total_key="total_tokens",
            ),
            provider_request_id=headers.get("x-request-id") or data.get("id"),
        )
