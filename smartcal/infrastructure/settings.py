"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os

# Environment
ENV = os.getenv("SMARTCAL_ENV", "development")
DEBUG = ENV == "development"

# API Configuration (PORT matches the client's default of localhost:5000)
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", os.getenv("API_PORT", "5000")))

# Google Gemini (credentials are read at model init, see smartcal.llm.gemini)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_LOCATION = os.getenv("GEMINI_LOCATION", "us-central1")

# Dates in summaries are rendered in this zone
DISPLAY_TIMEZONE = os.getenv("SMARTCAL_TIMEZONE", "UTC")

# Browser client origins allowed by CORS (comma separated)
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("SMARTCAL_CORS_ORIGINS", "").split(",")
    if origin.strip()
]


def is_production() -> bool:
    """Check if running in production"""
    return ENV == "production"


def is_development() -> bool:
    """Check if running in development"""
    return ENV == "development"
