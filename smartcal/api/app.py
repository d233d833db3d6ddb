"""FastAPI server for SmartCal AI suggestions and summaries"""

from __future__ import annotations

from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env before settings are read at import time
load_dotenv()

from smartcal.api.middleware.rate_limit import RateLimitMiddleware  # noqa: E402
from smartcal.api.middleware.security_headers import SecurityHeadersMiddleware  # noqa: E402
from smartcal.api.routes.health import router as health_router  # noqa: E402
from smartcal.api.routes.suggestions import router as suggestions_router  # noqa: E402
from smartcal.api.routes.summary import (  # noqa: E402
    EVENTS_REQUIRED_ERROR,
    SUMMARY_PATHS,
)
from smartcal.api.routes.summary import router as summary_router  # noqa: E402
from smartcal.config import (  # noqa: E402
    APP_VERSION,
    CORS_ORIGINS,
    GEMINI_MODEL,
    RATE_LIMIT_RPH,
    RATE_LIMIT_RPM,
    SERVICE_NAME,
)
from smartcal.infrastructure.settings import is_development  # noqa: E402
from smartcal.llm.gemini import llm_credentials  # noqa: E402
from smartcal.observability.logging import get_logger  # noqa: E402
from smartcal.observability.telemetry import counter, log_event  # noqa: E402
from smartcal.utils.redaction import redact  # noqa: E402

app = FastAPI(title=SERVICE_NAME, version=APP_VERSION)

logger = get_logger(__name__)


def _events_not_a_list(exc: RequestValidationError) -> bool:
    return any(
        err.get("type") == "list_type" and tuple(err.get("loc", ()))[-1:] == ("events",)
        for err in exc.errors()
    )


# Custom validation error handler to prevent information leakage
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Structurally invalid bodies get a 422 naming the bad fields only.

    Missing description/events are not validation errors; the routes answer
    those with 400, as does a summary `events` value that is not an array.
    """
    if request.url.path in SUMMARY_PATHS and _events_not_a_list(exc):
        counter("api.summary.bad_request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": EVENTS_REQUIRED_ERROR},
        )

    logger.warning("Validation error on %s: %s", redact(str(request.url)), exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors() if err.get("loc")],
        },
    )


# CORS - the browser client calls this API directly
ALLOWED_ORIGINS = list(CORS_ORIGINS)

# Vite and CRA dev servers
if is_development():
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

if not ALLOWED_ORIGINS:
    logger.warning("SMARTCAL_CORS_ORIGINS not set, allowing all origins")
    ALLOWED_ORIGINS = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=RATE_LIMIT_RPM,
    requests_per_hour=RATE_LIMIT_RPH,
    cors_origins=ALLOWED_ORIGINS,
)

app.add_middleware(SecurityHeadersMiddleware)

if not any(llm_credentials().values()):
    logger.warning(
        "No Gemini credentials (GEMINI_API_KEY / GOOGLE_CLOUD_PROJECT); "
        "AI endpoints will return fallback content"
    )

app.include_router(health_router)
app.include_router(suggestions_router)
app.include_router(summary_router)

log_event("api.startup", service="smartcal", version=APP_VERSION, model=GEMINI_MODEL)


@app.get("/")
def root() -> dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": APP_VERSION,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "suggestions": "/suggestions",
            "summary": "/summary",
            "debug_stats": "/debug/stats",
        },
    }
