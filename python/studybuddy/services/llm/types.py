"""Values passed between the completion provider and backend adapters."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Literal, Mapping

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Turn:
    """One prompt message. Adapters translate roles to their wire names."""

    role: Role
    content: str


@dataclass(frozen=True)
class LLMUsage:
    """Token counts as reported by a backend; a count it omits is None."""

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any] | None,
        *,
        prompt_key: str,
        completion_key: str,
        total_key: str,
    ) -> "LLMUsage | None":
        """Read counts from a backend's usage object, None if it sent none."""
        if not payload:
            return None
        return cls(
            prompt_tokens=payload.get(prompt_key),
            completion_tokens=payload.get(completion_key),
            total_tokens=payload.get(total_key),
        )


@dataclass(frozen=True)
class CompletionRequest:
    """What an adapter sends. The model is fixed per adapter.

    Attributes:
        messages: Turns in order, system turn first when there is one.
        max_tokens: Completion token cap.
        temperature: None leaves the backend default.
    """

    messages: list[Turn]
    max_tokens: int
    temperature: float | None = None

    def with_turn(self, turn: Turn) -> "CompletionRequest":
        """Copy of this request with one more turn at the end."""
        return replace(self, messages=[*self.messages, turn])


@dataclass(frozen=True)
class CompletionResponse:
    text: str
    usage: LLMUsage | None
    provider_request_id: str | None


@dataclass(frozen=True)
class StructuredResponse:
    """JSON-mode result, already decoded to an object."""

    data: dict[str, Any]
    usage: LLMUsage | None
    provider_request_id: str | None


class CompletionMode(str, Enum):
    """Provider operation of a call, as logged."""

    TEXT = "text"
    JSON = "json"
