"""
Lightweight in-process telemetry.

Nothing is shipped to an external backend: events go to the log as
structured lines, counters and latencies stay in memory so /debug/stats and
tests can read them back.
"""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from collections import deque
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("smartcal.telemetry")

# Most recent samples kept per latency metric
LATENCY_SAMPLE_LIMIT = 1000

_COUNTERS: dict[str, int] = {}
_LATENCIES: dict[str, deque[float]] = {}

# Guards both stores; sync routes update them from threadpool workers
_LOCK = threading.Lock()


def log_event(event_name: str, **fields: Any) -> None:
    """
    Structured log event. Caller must redact user text before passing it.

    Side Effects:
        - Writes to logger (info level)
    """
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """
    Increment an in-memory counter and emit a debug log.

    Side Effects:
        - Modifies _COUNTERS dict (in-memory state)
    """
    with _LOCK:
        value = _COUNTERS.get(name, 0) + increment
        _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def get_counter(name: str) -> int:
    return _COUNTERS.get(name, 0)


def get_counters() -> dict[str, int]:
    """Snapshot of all counters."""
    with _LOCK:
        return dict(_COUNTERS)


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """
    Time a code block and record the elapsed seconds under metric_name.

    The sample is recorded even when the block raises. Only the latest
    LATENCY_SAMPLE_LIMIT samples per metric are kept.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("timing=%s seconds=%.6f", metric_name, elapsed)
        with _LOCK:
            samples = _LATENCIES.get(metric_name)
            if samples is None:
                samples = _LATENCIES[metric_name] = deque(maxlen=LATENCY_SAMPLE_LIMIT)
            samples.append(elapsed)


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """
    Get latency statistics (count, min, max, avg, p50, p95) for a metric.
    """
    with _LOCK:
        samples = list(_LATENCIES.get(metric_name, ()))
    if not samples:
        return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0}

    sorted_samples = sorted(samples)
    count = len(sorted_samples)

    return {
        "count": count,
        "min": sorted_samples[0],
        "max": sorted_samples[-1],
        "avg": sum(sorted_samples) / count,
        "p50": sorted_samples[int(count * 0.50)],
        "p95": sorted_samples[min(int(count * 0.95), count - 1)],
    }


def latency_metrics() -> list[str]:
    with _LOCK:
        return sorted(_LATENCIES)


def reset_telemetry() -> None:
    """
    Clear counters and latencies (used by tests).

    Side Effects:
        - Clears _COUNTERS and _LATENCIES
    """
    with _LOCK:
        _COUNTERS.clear()
        _LATENCIES.clear()
