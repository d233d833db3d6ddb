"""
Helpers for keeping user text out of logs and for cleaning it before it
reaches a prompt.

Provides:
- redact(): Hash sensitive strings for correlation without exposure
- sanitize_for_prompt(): Strip prompt-injection phrases and cap length
"""

from __future__ import annotations

import re
from hashlib import sha256

# Patterns that could be used for prompt injection
INJECTION_PATTERNS = [
    r"ignore\s+(previous|above|all)\s+instructions?",
    r"disregard\s+(previous|above|all)\s+instructions?",
    r"forget\s+(previous|above|all)\s+instructions?",
    r"new\s+instructions?:",
    r"\[INST\]",
    r"\[/INST\]",
    r"<\|im_start\|>",
    r"<\|im_end\|>",
]
INJECTION_REGEX = re.compile("|".join(INJECTION_PATTERNS), re.IGNORECASE)


def redact(value: str | None) -> str:
    """
    Return a stable hash representation of a sensitive string.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def sanitize_for_prompt(text: str | None, max_length: int = 2000) -> str:
    """
    Clean user-provided text (event titles, descriptions) for prompt inclusion.

    Known injection phrases are replaced with [REDACTED] and the text is
    truncated to max_length. Ordinary punctuation is kept because event
    descriptions routinely contain it.
    """
    if not text:
        return ""

    text = text[:max_length]
    text = INJECTION_REGEX.sub("[REDACTED]", text)
    return text.strip()
