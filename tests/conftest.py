"""
Pytest configuration for SmartCal tests

Keeps the real Gemini backend out of every test: credentials are cleared and
model calls are replaced with stub callables injected into the suggester and
summary generator.
"""

from __future__ import annotations

import os

# Must be set before smartcal.config is imported
os.environ.setdefault("SMARTCAL_RATE_LIMIT_RPM", "100000")
os.environ.setdefault("SMARTCAL_RATE_LIMIT_RPH", "100000")
os.environ["SMARTCAL_TIMEZONE"] = "UTC"

import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def no_gemini_credentials(monkeypatch):
    """Make sure no test can reach the real Gemini API."""
    from smartcal.llm.gemini import clear_model_cache

    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
    clear_model_cache()
    yield
    clear_model_cache()


@pytest.fixture(autouse=True)
def fresh_telemetry():
    from smartcal.observability.telemetry import reset_telemetry

    reset_telemetry()
    yield
    reset_telemetry()


class StubLLM:
    """Deterministic stand-in for call_llm.

    `replies` maps a counter_prefix (e.g. "summary.overview") to the reply
    text, or to an exception instance to raise.
    """

    def __init__(self, replies: dict[str, object] | None = None, default: object = ""):
        self.replies = replies or {}
        self.default = default
        self.calls: list[dict[str, object]] = []

    def __call__(self, prompt: str, counter_prefix: str = "llm", **options: object) -> str:
        self.calls.append({"prompt": prompt, "counter_prefix": counter_prefix, **options})
        reply = self.replies.get(counter_prefix, self.default)
        if isinstance(reply, BaseException):
            raise reply
        return str(reply)


@pytest.fixture
def stub_llm_factory():
    return StubLLM


@pytest.fixture
def sample_events():
    return [
        {
            "id": "evt-1",
            "title": "Quarterly Planning",
            "description": "Plan Q3 goals with the product team",
            "start": "2025-03-14T14:00:00Z",
            "end": "2025-03-14T15:30:00Z",
            "color": "#3b82f6",
            "ownerId": "user-123",
        },
        {
            "id": "evt-2",
            "title": "Dentist",
            "start": "2025-03-15T09:05:00Z",
            "end": "2025-03-15T10:00:00Z",
        },
    ]
