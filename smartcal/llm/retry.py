"""Shared LLM call with retry logic.

Every model call in the service goes through call_llm(). The suggestions
endpoint and each summary sub-call wrap it in their own try/except to apply
their fallback content; this module only decides what is worth retrying.

Retries up to LLM_MAX_RETRIES times with exponential backoff on transient
SDK errors (DeadlineExceeded, ServiceUnavailable, ResourceExhausted,
InternalServerError), which are converted to builtin exception types first.
"""

from __future__ import annotations

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from smartcal.config import LLM_MAX_RETRIES, LLM_TIMEOUT_SECONDS
from smartcal.llm.gemini import get_backend, get_gemini_model
from smartcal.observability.logging import get_logger
from smartcal.observability.telemetry import counter, time_block

logger = get_logger(__name__)


def build_generation_config(
    temperature: float | None,
    max_output_tokens: int | None,
    json_output: bool,
) -> dict[str, object]:
    """Generation options accepted as a plain dict by both Gemini SDKs."""
    generation_config: dict[str, object] = {}
    if temperature is not None:
        generation_config["temperature"] = temperature
    if max_output_tokens is not None:
        generation_config["max_output_tokens"] = max_output_tokens
    if json_output:
        generation_config["response_mime_type"] = "application/json"
    return generation_config


@retry(
    stop=stop_after_attempt(LLM_MAX_RETRIES),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((TimeoutError, ConnectionError, OSError)),
    reraise=True,
)
def call_llm(
    prompt: str,
    counter_prefix: str = "llm",
    temperature: float | None = None,
    max_output_tokens: int | None = None,
    json_output: bool = False,
) -> str:
    """Call Gemini once (with retries) and return the response text.

    Args:
        prompt: The prompt to send to the model.
        counter_prefix: Telemetry prefix, e.g. "suggestions" or "summary.overview".
        temperature: Sampling temperature; SDK default when None.
        max_output_tokens: Output token budget; SDK default when None.
        json_output: Ask for application/json output. The caller still parses
            with extract_json() since the model may wrap JSON in Markdown fences.

    Raises:
        GeminiInitializationError: Model not configured (not retried).
        TimeoutError: On deadline exceeded (retryable).
        ConnectionError: On service unavailable or internal error (retryable).
        OSError: On resource exhausted / rate limited (retryable).
        Exception: On other errors (not retried, caller handles).
    """
    from google.api_core.exceptions import (
        DeadlineExceeded,
        InternalServerError,
        ResourceExhausted,
        ServiceUnavailable,
    )

    model = get_gemini_model()
    generation_config = build_generation_config(temperature, max_output_tokens, json_output)

    kwargs: dict[str, object] = {"generation_config": generation_config}
    if get_backend() == "genai":
        kwargs["request_options"] = {"timeout": LLM_TIMEOUT_SECONDS}

    counter(f"{counter_prefix}.llm_calls")
    try:
        with time_block(f"llm.{counter_prefix}.latency"):
            response = model.generate_content(prompt, **kwargs)
        return response.text
    except DeadlineExceeded as e:
        counter(f"{counter_prefix}.timeout")
        logger.warning("LLM call timed out after %ds", LLM_TIMEOUT_SECONDS)
        raise TimeoutError(f"LLM call timed out: {e}") from e
    except ServiceUnavailable as e:
        counter(f"{counter_prefix}.service_unavailable")
        logger.warning("LLM service unavailable, will retry: %s", e)
        raise ConnectionError(f"LLM service unavailable: {e}") from e
    except ResourceExhausted as e:
        counter(f"{counter_prefix}.rate_limited")
        logger.warning("LLM rate limited (429), will retry: %s", e)
        raise OSError(f"LLM rate limited: {e}") from e
    except InternalServerError as e:
        counter(f"{counter_prefix}.internal_error")
        logger.warning("LLM internal error (500), will retry: %s", e)
        raise ConnectionError(f"LLM internal error: {e}") from e
    except Exception as e:
        logger.error("LLM call failed: %s", e)
        raise
