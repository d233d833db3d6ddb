"""SmartCal AI API - Gemini-backed suggestions and summaries for calendar events"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so lightweight modules load without the Gemini SDKs
def __getattr__(name: str):
    """
    Lazy imports to avoid loading heavy dependencies when only importing lightweight modules.
    """
    if name in ("CalendarEvent", "SuggestionResult", "SummaryResult"):
        from smartcal.calendar import models

        return getattr(models, name)

    if name == "EventSuggester":
        from smartcal.calendar.suggestions import EventSuggester

        return EventSuggester

    if name == "SummaryGenerator":
        from smartcal.calendar.summary import SummaryGenerator

        return SummaryGenerator

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "CalendarEvent",
    "SuggestionResult",
    "SummaryResult",
    "EventSuggester",
    "SummaryGenerator",
]
