"""Permissive JSON extraction for model output.

Gemini is asked for application/json but still sometimes wraps the payload
in a Markdown code fence. extract_json() parses the reply as-is and only
falls back to stripping a ```json or bare ``` fence when that fails;
coerce_string_list() then forces the result into the list-of-strings shape
the summary fields need.
"""

from __future__ import annotations

import json
import re
from typing import Any

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_BARE_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")


class LLMParseError(ValueError):
    """Model output could not be coerced into the expected shape."""


def strip_code_fence(text: str) -> str:
    """Return the body of the first Markdown code fence, or the text itself."""
    text = text.strip()
    match = _JSON_FENCE.search(text) or _BARE_FENCE.search(text)
    if match and match.group(1):
        return match.group(1)
    return text


def extract_json(text: str | None) -> Any:
    """Parse JSON from model output, tolerating Markdown code fences.

    Raises:
        LLMParseError: If no valid JSON can be parsed.
    """
    if not text or not text.strip():
        raise LLMParseError("Empty model response")

    # String values may contain backticks, so try the reply unmodified first
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise LLMParseError(f"Invalid JSON in model response: {e}") from e


def coerce_list(data: Any) -> list[Any]:
    """Accept a JSON array, or an object wrapping exactly one array."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        lists = [value for value in data.values() if isinstance(value, list)]
        if len(lists) == 1:
            return lists[0]
    raise LLMParseError(f"Expected a JSON array, got {type(data).__name__}")


def coerce_string_list(data: Any) -> list[str]:
    """Coerce parsed JSON into a non-empty list of non-blank strings."""
    items = [item.strip() for item in coerce_list(data) if isinstance(item, str) and item.strip()]
    if not items:
        raise LLMParseError("Expected a non-empty array of strings")
    return items
