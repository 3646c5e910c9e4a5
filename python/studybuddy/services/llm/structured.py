"""Decoding helpers for JSON-mode completions.

Free-text models often wrap the requested JSON in prose ("Sure! Here you
go: {...} Hope that helps!"). extract_json_text keeps the span from the first
"{" to the last "}". It is a bracket heuristic, not a JSON-aware scan: stray
braces in the surrounding prose can widen the span and make decoding fail.
"""

import json
from typing import Any

from studybuddy.services.llm.errors import MalformedStructuredResponseError


def extract_json_text(text: str) -> str:
    """Return the substring between the first "{" and the last "}".

    If there is no such pair the text is returned unchanged, so the decode
    step reports it as malformed.
    """
    start = text.find("{")
    if start >= 0:
        end = text.rfind("}")
        if end > start:
            return text[start : end + 1]
    return text


def decode_json_object(text: str, *, provider: str) -> dict[str, Any]:
    """Decode text as a JSON object.

    Raises:
        MalformedStructuredResponseError: If text is not JSON or not an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedStructuredResponseError(
            f"Response is not valid JSON: {e.msg}", provider=provider
        ) from e

    if not isinstance(data, dict):
        raise MalformedStructuredResponseError(
            f"Expected a JSON object, got {type(data).__name__}", provider=provider
        )
    return data
