"""
Unit tests for EventSuggester.

Covers prompt construction, verbatim pass-through of JSON replies, and the
raw-text fallback for replies that are not JSON objects.
"""

from __future__ import annotations

import json

import pytest

from smartcal.calendar.models import DEFAULT_COLOR, PALETTE_HEX, EventColor
from smartcal.calendar.suggestions import (
    SUGGESTIONS_UNAVAILABLE,
    EventSuggester,
    fallback_suggestion,
    palette_prompt_lines,
)
from smartcal.observability.telemetry import get_counter


class TestPrompt:
    def test_prompt_embeds_description_and_palette(self):
        prompt = EventSuggester().build_prompt("Team offsite in the mountains")
        assert "I'm planning this event: Team offsite in the mountains." in prompt
        for color in EventColor:
            assert color.value in prompt
        assert '"suggestions"' in prompt and '"color"' in prompt

    def test_palette_lines(self):
        lines = palette_prompt_lines().splitlines()
        assert len(lines) == 6
        assert lines[0] == "- blue: #3b82f6 (default for work/business)"
        assert "- pink: #ec4899 (for personal/family)" in lines

    def test_braces_in_description_are_safe(self):
        prompt = EventSuggester().build_prompt("Birthday {party} for {name}")
        assert "Birthday {party} for {name}" in prompt


class TestSuggest:
    def test_json_object_returned_verbatim(self, stub_llm_factory):
        reply = {"suggestions": "Book the venue early.", "color": "#f59e0b", "extra": 1}
        stub = stub_llm_factory(default=json.dumps(reply))

        assert EventSuggester(llm_call=stub).suggest("Birthday party") == reply
        assert get_counter("suggestions.success") == 1

    def test_backticks_in_json_values_kept(self, stub_llm_factory):
        reply = {"suggestions": "Run ```npm test``` before the demo.", "color": "#8b5cf6"}
        stub = stub_llm_factory(default=json.dumps(reply))

        assert EventSuggester(llm_call=stub).suggest("Demo day") == reply
        assert get_counter("suggestions.parse_error") == 0

    def test_requests_json_output(self, stub_llm_factory):
        stub = stub_llm_factory(default='{"suggestions": "x", "color": "#3b82f6"}')
        EventSuggester(llm_call=stub).suggest("Gym session")

        assert stub.calls[0]["counter_prefix"] == "suggestions"
        assert stub.calls[0]["json_output"] is True

    def test_fenced_json_is_parsed(self, stub_llm_factory):
        stub = stub_llm_factory(default='```json\n{"suggestions": "Stretch", "color": "#10b981"}\n```')
        assert EventSuggester(llm_call=stub).suggest("Yoga") == {
            "suggestions": "Stretch",
            "color": "#10b981",
        }

    def test_plain_text_wrapped_with_default_color(self, stub_llm_factory):
        stub = stub_llm_factory(default="Bring water and sunscreen.")
        result = EventSuggester(llm_call=stub).suggest("Hike")

        assert result == {"suggestions": "Bring water and sunscreen.", "color": DEFAULT_COLOR}
        assert get_counter("suggestions.parse_error") == 1

    def test_json_array_treated_as_unparsable(self, stub_llm_factory):
        stub = stub_llm_factory(default='["tip one", "tip two"]')
        result = EventSuggester(llm_call=stub).suggest("Hike")

        assert result == {"suggestions": '["tip one", "tip two"]', "color": DEFAULT_COLOR}

    def test_empty_reply_gets_placeholder_text(self, stub_llm_factory):
        result = EventSuggester(llm_call=stub_llm_factory(default="  ")).suggest("Hike")
        assert result == {"suggestions": SUGGESTIONS_UNAVAILABLE, "color": DEFAULT_COLOR}

    def test_call_failure_propagates(self, stub_llm_factory):
        stub = stub_llm_factory(default=ConnectionError("unavailable"))
        with pytest.raises(ConnectionError):
            EventSuggester(llm_call=stub).suggest("Hike")

    def test_deterministic_model_gives_identical_output(self, stub_llm_factory):
        stub = stub_llm_factory(default='{"suggestions": "Arrive early", "color": "#ef4444"}')
        suggester = EventSuggester(llm_call=stub)
        assert suggester.suggest("Exam") == suggester.suggest("Exam")
        assert stub.calls[0]["prompt"] == stub.calls[1]["prompt"]


def test_fallback_suggestion_uses_palette_color():
    fallback = fallback_suggestion()
    assert fallback["suggestions"] == SUGGESTIONS_UNAVAILABLE
    assert fallback["color"] in PALETTE_HEX
