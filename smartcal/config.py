"""Centralized configuration for the SmartCal API.

Re-exports everything from smartcal.infrastructure.settings so callers can
import a single module, then adds typed constants for the LLM, rate limiting,
and request limits. Environment variable overrides use safe defaults so the
app starts without extra env configuration.
"""

from __future__ import annotations

import os

from smartcal.infrastructure.settings import *  # noqa: F401, F403

# --- App ---
APP_VERSION: str = "1.0.0"
SERVICE_NAME: str = "SmartCal AI API"

# --- LLM ---
LLM_TIMEOUT_SECONDS: int = int(os.getenv("SMARTCAL_LLM_TIMEOUT", "30"))
LLM_MAX_RETRIES: int = int(os.getenv("SMARTCAL_LLM_MAX_RETRIES", "3"))

# --- Prompt building ---
PROMPT_DESCRIPTION_TRUNCATION: int = 100
PROMPT_MAX_DESCRIPTION_CHARS: int = 2000

# --- Rate Limiting ---
RATE_LIMIT_RPM: int = int(os.getenv("SMARTCAL_RATE_LIMIT_RPM", "60"))
RATE_LIMIT_RPH: int = int(os.getenv("SMARTCAL_RATE_LIMIT_RPH", "1000"))
RATE_LIMIT_MAX_IPS: int = 10000

# --- API ---
API_MAX_EVENTS: int = 200
API_MAX_TEXT_LENGTH: int = 10_000
