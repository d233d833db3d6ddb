"""Event summary endpoint.

POST /summary (and legacy /api/summary). Model problems never surface as
errors: the response is a 200 with fallback content, plus `note` when the
whole summary is static and `fallbackFields` when only some fields are.
Only a failure outside the model chain yields a 500 with a static stub.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from smartcal.calendar.formatting import UNAVAILABLE_SUMMARY_HTML, render_summary_html
from smartcal.calendar.models import SummaryRequest
from smartcal.calendar.summary import SummaryGenerator
from smartcal.observability.logging import get_logger
from smartcal.observability.telemetry import counter, log_event
from smartcal.utils.error_sanitizer import get_safe_error_detail

router = APIRouter(tags=["summary"])
logger = get_logger(__name__)

SUMMARY_PATHS = frozenset({"/summary", "/api/summary"})
EVENTS_REQUIRED_ERROR = "Valid events array is required"

_generator = SummaryGenerator()


def get_summary_generator() -> SummaryGenerator:
    return _generator


@router.post("/api/summary")
@router.post("/summary")
def create_summary(
    request: SummaryRequest | None = None,
    generator: SummaryGenerator = Depends(get_summary_generator),
) -> Any:
    """Structured summary of upcoming events, rendered to HTML."""
    if request is None or not request.events:
        counter("api.summary.bad_request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": EVENTS_REQUIRED_ERROR},
        )

    try:
        outcome = generator.generate(request.events)
        html = render_summary_html(outcome.result)
    except Exception as e:
        counter("api.summary.error")
        log_event("api.summary.error", error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to generate summary",
                "details": get_safe_error_detail(e),
                "summary": UNAVAILABLE_SUMMARY_HTML,
            },
        )

    body: dict[str, Any] = {
        "summary": html,
        "rawData": outcome.result.model_dump(),
    }
    if outcome.note:
        body["note"] = outcome.note
    if outcome.fallback_fields:
        body["fallbackFields"] = outcome.fallback_fields
    return body
