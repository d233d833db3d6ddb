"""
Event Suggester - planning tips and a color pick for a single event.

One Gemini call per request. The model is asked for a JSON object with
"suggestions" and "color"; a parsed object is returned as-is, anything
unparsable is wrapped with the default color.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from smartcal.calendar.models import DEFAULT_COLOR, EventColor, SuggestionResult
from smartcal.config import PROMPT_MAX_DESCRIPTION_CHARS
from smartcal.llm.parsing import LLMParseError, extract_json
from smartcal.llm.prompts import get_prompt_loader
from smartcal.llm.retry import call_llm
from smartcal.observability.logging import get_logger
from smartcal.observability.telemetry import counter, log_event
from smartcal.utils.redaction import redact, sanitize_for_prompt

logger = get_logger(__name__)

SUGGESTIONS_UNAVAILABLE = "Unable to get suggestions at this time."

LLMCall = Callable[..., str]


def palette_prompt_lines() -> str:
    """Palette as prompt bullets, e.g. '- blue: #3b82f6 (default for work/business)'."""
    return "\n".join(
        f"- {color.name.lower()}: {color.value} ({color.usage})" for color in EventColor
    )


def fallback_suggestion() -> dict[str, Any]:
    """Static payload sent when the model call itself fails."""
    return SuggestionResult(suggestions=SUGGESTIONS_UNAVAILABLE, color=DEFAULT_COLOR).model_dump()


class EventSuggester:
    """Builds the suggestion prompt, calls the model, and coerces the reply."""

    PROMPT_NAME = "suggestions"

    def __init__(self, llm_call: LLMCall | None = None):
        self._llm_call = llm_call

    def build_prompt(self, description: str) -> str:
        return get_prompt_loader().render(
            self.PROMPT_NAME,
            description=sanitize_for_prompt(description, max_length=PROMPT_MAX_DESCRIPTION_CHARS),
            palette=palette_prompt_lines(),
        )

    def suggest(self, description: str) -> dict[str, Any]:
        """
        Get suggestions and a color for an event description.

        Returns:
            The model's JSON object verbatim, or {"suggestions": <raw text>,
            "color": DEFAULT_COLOR} when the reply is not a JSON object.

        Raises:
            Exception: Whatever the model call raised after retries. The
                route turns this into the 500 fallback payload.

        Side Effects:
            - Calls Gemini API
            - Increments telemetry counters
        """
        llm_call = self._llm_call or call_llm
        prompt = self.build_prompt(description)

        log_event("suggestions.request", description=redact(description))
        text = llm_call(prompt, counter_prefix="suggestions", json_output=True)

        return self.parse_response(text)

    def parse_response(self, text: str) -> dict[str, Any]:
        try:
            data = extract_json(text)
        except LLMParseError as e:
            logger.warning("Suggestions response was not JSON: %s", e)
            counter("suggestions.parse_error")
            return self._wrap_raw_text(text)

        if not isinstance(data, dict):
            logger.warning("Suggestions response was %s, expected object", type(data).__name__)
            counter("suggestions.parse_error")
            return self._wrap_raw_text(text)

        counter("suggestions.success")
        return data

    @staticmethod
    def _wrap_raw_text(text: str) -> dict[str, Any]:
        raw = (text or "").strip() or SUGGESTIONS_UNAVAILABLE
        return SuggestionResult(suggestions=raw, color=DEFAULT_COLOR).model_dump()
