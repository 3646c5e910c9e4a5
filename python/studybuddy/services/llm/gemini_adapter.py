"""Gemini generateContent backend (fallback).

POST {GEMINI_BASE_URL}/{model}:generateContent. The key travels in the
x-goog-api-key header, never in the query string.

Wire shape:
- system turns are lifted into systemInstruction.parts
- "assistant" becomes "model"; every turn is {"role", "parts": [{"text"}]}
- max_tokens and temperature go under generationConfig
- reply text is the concatenated parts of the first candidate

Gemini has no JSON object mode here. complete_json appends a user turn
asking for a bare JSON object, then decodes the span between the first "{"
and the last "}" of the reply. Gemini sends no request ID.
"""

from studybuddy.services.llm.adapter import BackendAdapter
from studybuddy.services.llm.errors import BackendInvocationError, LLMErrorClass
from studybuddy.services.llm.structured import decode_json_object, extract_json_text
from studybuddy.services.llm.types import (
    CompletionRequest,
    CompletionResponse,
    LLMUsage,
    StructuredResponse,
    Turn,
)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

JSON_ONLY_INSTRUCTION = (
    "Please format your response as a valid JSON object with no explanations "
    "or text outside the JSON."
)

WIRE_ROLES = {"user": "user", "assistant": "model"}


class GeminiAdapter(BackendAdapter):
    name = "gemini"
    display_name = "Gemini"

    async def complete(self, req: CompletionRequest) -> CompletionResponse:
        response = await self._client.post(
            f"{GEMINI_BASE_URL}/{self.model_name}:generateContent",
            headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
            json=self._body(req),
            timeout=self._timeout(),
        )
        response.raise_for_status()
        return self._parse(response.json())

    async def complete_json(self, req: CompletionRequest) -> StructuredResponse:
        response = await self.complete(req.with_turn(Turn(role="user", content=JSON_ONLY_INSTRUCTION)))
        return StructuredResponse(
            data=decode_json_object(extract_json_text(response.text), provider=self.name),
            usage=response.usage,
            provider_request_id=None,
        )

    def _body(self, req: CompletionRequest) -> dict:
        system_parts = [{"text": t.content} for t in req.messages if t.role == "system"]
        generation_config: dict = {"maxOutputTokens": req.max_tokens}
        if req.temperature is not None:
            generation_config["temperature"] = req.temperature

        body: dict = {
            "contents": [
                {"role": WIRE_ROLES[t.role], "parts": [{"text": t.content}]}
                for t in req.messages
                if t.role != "system"
            ],
            "generationConfig": generation_config,
        }
        if system_parts:
            body["systemInstruction"] = {"parts": system_parts}
        return body

    def _parse(self, data: dict) -> CompletionResponse:
        candidates = data.get("candidates") or []
        if not candidates:
            raise BackendInvocationError(
                LLMErrorClass.PROVIDER_DOWN,
                "Gemini response missing candidates",
                provider=self.name,
            )

        parts = (candidates[0].get("content") or {}).get("parts") or []
        return CompletionResponse(
            text="".join(part["text"] for part in parts if "text" in part),
            usage=LLMUsage.from_payload(
                data.get("usageMetadata"),
                prompt_key="promptTokenCount",
                completion_key="candidatesTokenCount",
                total_key="totalTokenCount",
            ),
            provider_request_id=None,
        )
