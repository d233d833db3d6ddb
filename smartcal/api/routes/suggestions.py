"""Event suggestion endpoint.

POST /suggestions (and legacy /api/suggestions). Always answers with
something renderable: model failures become a 500 that still carries
fallback suggestions and the default color.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from smartcal.calendar.models import SuggestionRequest
from smartcal.calendar.suggestions import EventSuggester, fallback_suggestion
from smartcal.observability.logging import get_logger
from smartcal.observability.telemetry import counter, log_event
from smartcal.utils.error_sanitizer import get_safe_error_detail

router = APIRouter(tags=["suggestions"])
logger = get_logger(__name__)

_suggester = EventSuggester()


def get_event_suggester() -> EventSuggester:
    return _suggester


@router.post("/api/suggestions")
@router.post("/suggestions")
def create_suggestions(
    request: SuggestionRequest | None = None,
    suggester: EventSuggester = Depends(get_event_suggester),
) -> Any:
    """Planning tips and a palette color for one event description."""
    if request is None or not (request.description or "").strip():
        counter("api.suggestions.bad_request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Description is required"},
        )

    try:
        return suggester.suggest(request.description)
    except Exception as e:
        counter("api.suggestions.error")
        log_event("api.suggestions.error", error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to generate suggestions",
                "details": get_safe_error_detail(e),
                **fallback_suggestion(),
            },
        )
