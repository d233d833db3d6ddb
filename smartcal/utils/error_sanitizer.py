"""
Error message sanitization.

Exception text from the Gemini SDKs can carry API keys, project ids and
file paths. Anything returned to the browser in a `details` field goes
through get_safe_error_detail() first.
"""

from __future__ import annotations

import re

from smartcal.observability.logging import get_logger

logger = get_logger(__name__)

# Patterns that might leak sensitive information
SENSITIVE_PATTERNS = [
    # File paths
    r"/[^\s]+\.py",
    r"[A-Za-z]:\\[^\s]+",
    # Stack trace indicators
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    # API keys / secrets
    r"AIza[0-9A-Za-z_-]{20,}",
    r"key=[^\s&]+",
    r"Bearer [A-Za-z0-9._-]+",
    # Cloud resource paths
    r"projects/[^\s]+",
    # Internal module names
    r"smartcal\.[a-z_.]+",
]

# Generic error messages for different error types
GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    422: "Invalid data format.",
    429: "Too many requests. Please try again later.",
    500: "An internal error occurred. Please try again later.",
    503: "Service temporarily unavailable.",
}

MAX_DETAIL_LENGTH = 200


def sanitize_error_message(message: str, status_code: int = 500) -> str:
    """
    Sanitize an error message to prevent information leakage.

    Messages matching a sensitive pattern are replaced with the generic
    message for status_code; the rest are truncated to MAX_DETAIL_LENGTH.
    """
    if not message:
        return GENERIC_MESSAGES.get(status_code, "An error occurred.")

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, message, re.IGNORECASE):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return GENERIC_MESSAGES.get(status_code, "An error occurred.")

    message = " ".join(message.split())
    if len(message) > MAX_DETAIL_LENGTH:
        message = message[:MAX_DETAIL_LENGTH] + "..."
    return message


def get_safe_error_detail(error: Exception, status_code: int = 500) -> str:
    """
    Get a safe error detail string for HTTP responses.

    Side Effects:
        - Logs the full error at error level
    """
    logger.error("Error (status=%d): %s - %s", status_code, type(error).__name__, str(error))
    return sanitize_error_message(str(error), status_code)
