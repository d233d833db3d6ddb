"""Tests for call_llm: generation options, SDK error conversion, retries."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions
from tenacity import wait_none

from smartcal.config import LLM_MAX_RETRIES, LLM_TIMEOUT_SECONDS
from smartcal.llm import retry as retry_module
from smartcal.llm.gemini import GeminiInitializationError
from smartcal.llm.retry import build_generation_config, call_llm
from smartcal.observability.telemetry import get_counter

fast_call_llm = call_llm.retry_with(wait=wait_none())


@pytest.fixture
def model(monkeypatch):
    fake = MagicMock()
    fake.generate_content.return_value = MagicMock(text='{"ok": true}')
    monkeypatch.setattr(retry_module, "get_gemini_model", lambda: fake)
    monkeypatch.setattr(retry_module, "get_backend", lambda: "genai")
    return fake


class TestBuildGenerationConfig:
    def test_json_output(self):
        assert build_generation_config(0.2, 800, True) == {
            "temperature": 0.2,
            "max_output_tokens": 800,
            "response_mime_type": "application/json",
        }

    def test_text_output(self):
        assert build_generation_config(0.3, 150, False) == {
            "temperature": 0.3,
            "max_output_tokens": 150,
        }

    def test_sdk_defaults(self):
        assert build_generation_config(None, None, False) == {}


class TestCallLLM:
    def test_returns_response_text(self, model):
        assert call_llm("prompt", counter_prefix="suggestions", json_output=True) == '{"ok": true}'

        args, kwargs = model.generate_content.call_args
        assert args == ("prompt",)
        assert kwargs["generation_config"] == {"response_mime_type": "application/json"}
        assert kwargs["request_options"] == {"timeout": LLM_TIMEOUT_SECONDS}

    def test_vertex_backend_has_no_request_options(self, model, monkeypatch):
        monkeypatch.setattr(retry_module, "get_backend", lambda: "vertexai")
        call_llm("prompt", temperature=0.3, max_output_tokens=150)

        _, kwargs = model.generate_content.call_args
        assert "request_options" not in kwargs
        assert kwargs["generation_config"] == {"temperature": 0.3, "max_output_tokens": 150}

    def test_counts_calls_under_prefix(self, model):
        call_llm("prompt", counter_prefix="summary.overview")
        call_llm("prompt", counter_prefix="summary.overview")
        assert get_counter("summary.overview.llm_calls") == 2

    @pytest.mark.parametrize(
        ("sdk_error", "expected", "counter_name"),
        [
            (google_exceptions.DeadlineExceeded("slow"), TimeoutError, "timeout"),
            (google_exceptions.ServiceUnavailable("down"), ConnectionError, "service_unavailable"),
            (google_exceptions.ResourceExhausted("quota"), OSError, "rate_limited"),
            (google_exceptions.InternalServerError("boom"), ConnectionError, "internal_error"),
        ],
    )
    def test_transient_errors_retried_then_raised(self, model, sdk_error, expected, counter_name):
        model.generate_content.side_effect = sdk_error

        with pytest.raises(expected):
            fast_call_llm("prompt", counter_prefix="suggestions")

        assert model.generate_content.call_count == LLM_MAX_RETRIES
        assert get_counter(f"suggestions.{counter_name}") == LLM_MAX_RETRIES

    def test_recovers_after_transient_error(self, model):
        model.generate_content.side_effect = [
            google_exceptions.ServiceUnavailable("down"),
            MagicMock(text="recovered"),
        ]

        assert fast_call_llm("prompt") == "recovered"
        assert model.generate_content.call_count == 2

    def test_other_errors_not_retried(self, model):
        model.generate_content.side_effect = ValueError("blocked by safety filter")

        with pytest.raises(ValueError):
            fast_call_llm("prompt")

        assert model.generate_content.call_count == 1

    def test_unconfigured_model_not_retried(self):
        with pytest.raises(GeminiInitializationError):
            fast_call_llm("prompt")
