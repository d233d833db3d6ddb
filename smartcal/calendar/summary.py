"""
Summary Generator - structured overview of a list of upcoming events.

Up to four sequential Gemini calls, one per summary field:

    highlights    per-event 1-2 sentence highlight   (temp 0.2, 800 tokens, JSON)
    preparations  3-5 preparation actions            (temp 0.3, 400 tokens, JSON)
    priorities    3-5 priority items                 (temp 0.3, 400 tokens, JSON)
    overview      1-2 sentence overview              (temp 0.3, 150 tokens, text)

A call that fails or returns unusable output defaults only its own field.
When the model is not configured, or every call fails, the whole summary is
built statically from the input events instead.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from smartcal.calendar.formatting import build_events_prompt, to_summary_event
from smartcal.calendar.models import CalendarEvent, SummaryResult
from smartcal.llm.gemini import GeminiInitializationError
from smartcal.llm.parsing import LLMParseError, coerce_list, coerce_string_list, extract_json
from smartcal.llm.prompts import get_prompt_loader
from smartcal.llm.retry import call_llm
from smartcal.observability.logging import get_logger
from smartcal.observability.telemetry import counter, log_event

logger = get_logger(__name__)

LLMCall = Callable[..., str]

# Per-field defaults when a sub-call fails
FALLBACK_HIGHLIGHT = "Key event in your schedule."
MISSING_HIGHLIGHT = "Important event on your calendar."
FALLBACK_OVERVIEW = "Here's a summary of your upcoming events."
FALLBACK_PREPARATIONS = [
    "Review all event details in advance",
    "Set reminders for each upcoming event",
    "Prepare any necessary materials",
    "Confirm attendance with relevant parties",
]
FALLBACK_PRIORITIES = [
    "Focus on the most time-sensitive events first",
    "Allocate adequate preparation time for each event",
    "Follow up on any outstanding commitments",
    "Balance your schedule to avoid overcommitment",
]

# Whole-summary static content (no model involved)
STATIC_KEY_POINT = "Review details for this event."
STATIC_PREPARATIONS = [
    "Review details for all upcoming events",
    "Set reminders on your phone or calendar",
    "Check for any schedule conflicts",
    "Prepare necessary materials in advance",
]
STATIC_PRIORITIES = [
    "Attend to time-sensitive events first",
    "Confirm attendance for all events",
    "Allow enough travel time between events",
    "Follow up on any required actions",
]

FALLBACK_NOTE = "Using fallback data due to API error"


@dataclass(frozen=True)
class SummaryCall:
    """Generation settings for one summary field."""

    field: str
    prompt_name: str
    temperature: float
    max_output_tokens: int
    json_output: bool = True


HIGHLIGHTS_CALL = SummaryCall("highlights", "summary_highlights", 0.2, 800)
PREPARATIONS_CALL = SummaryCall("preparations", "summary_preparations", 0.3, 400)
PRIORITIES_CALL = SummaryCall("priorities", "summary_priorities", 0.3, 400)
OVERVIEW_CALL = SummaryCall("overview", "summary_overview", 0.3, 150, json_output=False)

SUMMARY_CALLS = (HIGHLIGHTS_CALL, PREPARATIONS_CALL, PRIORITIES_CALL, OVERVIEW_CALL)


@dataclass
class SummaryOutcome:
    """A summary plus how much of it came from fallbacks."""

    result: SummaryResult
    fallback_fields: list[str] = field(default_factory=list)
    note: str | None = None

    @property
    def is_static(self) -> bool:
        return self.note is not None


def build_static_summary(events: Sequence[CalendarEvent]) -> SummaryResult:
    """Summary built only from the input events, with no model calls."""
    return SummaryResult(
        overview=FALLBACK_OVERVIEW,
        events=[to_summary_event(event, [STATIC_KEY_POINT]) for event in events],
        preparations=list(STATIC_PREPARATIONS),
        priorities=list(STATIC_PRIORITIES),
    )


def parse_highlights(text: str) -> list[str | None]:
    """Positional highlights; None where an item has no usable highlight."""
    items = coerce_list(extract_json(text))
    highlights: list[str | None] = []
    for item in items:
        highlight = item.get("highlight") if isinstance(item, dict) else None
        if isinstance(highlight, str) and highlight.strip():
            highlights.append(highlight.strip())
        else:
            highlights.append(None)
    return highlights


def parse_string_list(text: str) -> list[str]:
    return coerce_string_list(extract_json(text))


def parse_overview(text: str) -> str:
    overview = (text or "").strip().strip('"').strip()
    if not overview:
        raise LLMParseError("Empty overview")
    return overview


class SummaryGenerator:
    """Runs the per-field model calls and merges them into a SummaryResult."""

    def __init__(self, llm_call: LLMCall | None = None):
        self._llm_call = llm_call

    def generate(self, events: Sequence[CalendarEvent]) -> SummaryOutcome:
        """
        Summarize events. Never raises for model problems.

        Side Effects:
            - Calls Gemini API up to four times, sequentially
            - Logs summary events and increments telemetry counters
        """
        events_text = build_events_prompt(events)
        log_event("summary.request", event_count=len(events))

        try:
            outcome = self._generate_with_model(events, events_text)
        except GeminiInitializationError as e:
            logger.error("Gemini unavailable, using static summary: %s", e)
            counter("summary.static_fallback")
            return SummaryOutcome(result=build_static_summary(events), note=FALLBACK_NOTE)

        log_event(
            "summary.generated",
            event_count=len(events),
            fallback_fields=outcome.fallback_fields,
            static=outcome.is_static,
        )
        return outcome

    def _generate_with_model(
        self, events: Sequence[CalendarEvent], events_text: str
    ) -> SummaryOutcome:
        fallback_fields: list[str] = []
        call_failures = 0

        def run(call: SummaryCall, parse: Callable[[str], Any], default: Any) -> Any:
            nonlocal call_failures
            try:
                text = self._call(call, events_text)
            except GeminiInitializationError:
                raise
            except Exception as e:
                call_failures += 1
                counter(f"summary.{call.field}.call_error")
                logger.error("Summary %s call failed: %s", call.field, e)
                fallback_fields.append(call.field)
                return default

            try:
                return parse(text)
            except LLMParseError as e:
                counter(f"summary.{call.field}.parse_error")
                logger.warning("Could not parse summary %s: %s", call.field, e)
                fallback_fields.append(call.field)
                return default

        highlights = run(HIGHLIGHTS_CALL, parse_highlights, [FALLBACK_HIGHLIGHT] * len(events))
        preparations = run(PREPARATIONS_CALL, parse_string_list, list(FALLBACK_PREPARATIONS))
        priorities = run(PRIORITIES_CALL, parse_string_list, list(FALLBACK_PRIORITIES))
        overview = run(OVERVIEW_CALL, parse_overview, FALLBACK_OVERVIEW)

        if call_failures == len(SUMMARY_CALLS):
            counter("summary.static_fallback")
            return SummaryOutcome(result=build_static_summary(events), note=FALLBACK_NOTE)

        summary_events = []
        for index, event in enumerate(events):
            if index < len(highlights):
                highlight = highlights[index] or FALLBACK_HIGHLIGHT
            else:
                highlight = MISSING_HIGHLIGHT
            summary_events.append(to_summary_event(event, [highlight]))

        result = SummaryResult(
            overview=overview,
            events=summary_events,
            preparations=preparations,
            priorities=priorities,
        )
        return SummaryOutcome(result=result, fallback_fields=fallback_fields)

    def _call(self, call: SummaryCall, events_text: str) -> str:
        llm_call = self._llm_call or call_llm
        prompt = get_prompt_loader().render(call.prompt_name, events_text=events_text)
        return llm_call(
            prompt,
            counter_prefix=f"summary.{call.field}",
            temperature=call.temperature,
            max_output_tokens=call.max_output_tokens,
            json_output=call.json_output,
        )
