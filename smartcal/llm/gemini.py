"""
Gemini Model Manager - Singleton for shared model instance.

Both the suggestions and summary endpoints share one GenerativeModel.
Generation options (temperature, token budget, JSON mime type) are passed
per call, so a single instance serves every prompt.

Supports two backends:
  1. google-generativeai (default): uses GEMINI_API_KEY (or GOOGLE_API_KEY)
  2. Vertex AI SDK: uses GOOGLE_CLOUD_PROJECT + service account credentials
"""

from __future__ import annotations

import os
from functools import lru_cache

from smartcal.infrastructure.settings import GEMINI_LOCATION, GEMINI_MODEL
from smartcal.observability.logging import get_logger

logger = get_logger(__name__)

# Which SDK served the cached model: "genai" or "vertexai"
_backend: str | None = None


class GeminiInitializationError(RuntimeError):
    """Raised when Gemini model cannot be initialized."""


def _api_key() -> str | None:
    # Read env fresh: settings may have been imported before load_dotenv()
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


def llm_credentials() -> dict[str, bool]:
    """Report which Gemini credentials are present (no API call)."""
    return {
        "gemini_api_key": bool(_api_key()),
        "google_cloud_project": bool(os.getenv("GOOGLE_CLOUD_PROJECT")),
    }


@lru_cache(maxsize=1)
def get_gemini_model():
    """
    Get or create shared Gemini model instance.

    Uses @lru_cache for a thread-safe singleton. An API key selects the
    google-generativeai backend; otherwise GOOGLE_CLOUD_PROJECT selects
    Vertex AI.

    Returns:
        GenerativeModel: Shared Gemini model

    Raises:
        GeminiInitializationError: If model cannot be initialized
    """
    global _backend
    api_key = _api_key()
    project = os.getenv("GOOGLE_CLOUD_PROJECT")
    location = os.getenv("GEMINI_LOCATION") or GEMINI_LOCATION

    if api_key:
        try:
            import google.generativeai as genai
        except ImportError as e:
            raise GeminiInitializationError(
                "GEMINI_API_KEY is set but google-generativeai is not installed."
            ) from e

        try:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(GEMINI_MODEL)
        except Exception as e:
            logger.error("Failed to initialize Gemini model: %s", e)
            raise GeminiInitializationError(f"Failed to initialize Gemini: {e}") from e

        _backend = "genai"
        logger.info("Initialized Gemini model (google-generativeai): model=%s", GEMINI_MODEL)
        return model

    if project:
        try:
            import vertexai
            from vertexai.generative_models import GenerativeModel
        except ImportError as e:
            raise GeminiInitializationError(
                "GOOGLE_CLOUD_PROJECT is set but google-cloud-aiplatform is not installed."
            ) from e

        try:
            vertexai.init(project=project, location=location)
            model = GenerativeModel(GEMINI_MODEL)
        except Exception as e:
            logger.error("Failed to initialize Gemini model: %s", e)
            raise GeminiInitializationError(f"Failed to initialize Gemini: {e}") from e

        _backend = "vertexai"
        logger.info(
            "Initialized Gemini model (Vertex AI): project=%s, location=%s, model=%s",
            project,
            location,
            GEMINI_MODEL,
        )
        return model

    raise GeminiInitializationError(
        "No Gemini credentials configured. Set GEMINI_API_KEY or GOOGLE_CLOUD_PROJECT."
    )


def clear_model_cache() -> None:
    """
    Clear the cached model instance.

    Useful for testing or when reconfiguration is needed.
    """
    global _backend
    get_gemini_model.cache_clear()
    _backend = None
    logger.info("Cleared Gemini model cache")


def get_backend() -> str | None:
    """Backend of the cached model ("genai", "vertexai"), None before init."""
    return _backend
