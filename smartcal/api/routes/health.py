"""Health check and debug endpoints for SmartCal API.

- /health - Liveness plus Gemini credential presence
- /debug/stats - In-memory counters and model-call latencies (no user data)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from smartcal.config import APP_VERSION, GEMINI_MODEL, SERVICE_NAME
from smartcal.llm.gemini import llm_credentials
from smartcal.observability.telemetry import get_counters, get_latency_stats, latency_metrics

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint.

    Reports credential readiness for Gemini without making an API call.
    """
    credentials = llm_credentials()

    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "llm": {
            "ready": any(credentials.values()),
            "model": GEMINI_MODEL,
            **credentials,
        },
    }


@router.get("/debug/stats")
async def debug_stats() -> dict[str, Any]:
    """Aggregate counters and LLM latency stats since process start."""
    return {
        "counters": get_counters(),
        "latency": {name: get_latency_stats(name) for name in latency_metrics()},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
