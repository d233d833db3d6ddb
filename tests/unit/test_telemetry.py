"""Tests for in-memory counters and latency tracking"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from smartcal.observability.telemetry import (
    LATENCY_SAMPLE_LIMIT,
    counter,
    get_counter,
    get_counters,
    get_latency_stats,
    latency_metrics,
    reset_telemetry,
    time_block,
)


def test_counter_increments():
    assert counter("summary.static_fallback") == 1
    assert counter("summary.static_fallback", 2) == 3
    assert get_counter("summary.static_fallback") == 3
    assert get_counter("never.touched") == 0


def test_counters_snapshot_is_a_copy():
    counter("a")
    snapshot = get_counters()
    snapshot["a"] = 99
    assert get_counter("a") == 1


def test_time_block_records_even_on_error():
    with time_block("llm.suggestions.latency"):
        pass
    with pytest.raises(RuntimeError):
        with time_block("llm.suggestions.latency"):
            raise RuntimeError("boom")

    stats = get_latency_stats("llm.suggestions.latency")
    assert stats["count"] == 2
    assert stats["min"] <= stats["p50"] <= stats["max"]
    assert latency_metrics() == ["llm.suggestions.latency"]


def test_latency_samples_capped():
    for _ in range(LATENCY_SAMPLE_LIMIT + 250):
        with time_block("llm.summary.overview.latency"):
            pass

    assert get_latency_stats("llm.summary.overview.latency")["count"] == LATENCY_SAMPLE_LIMIT


def test_concurrent_increments_not_lost():
    def bump(_):
        for _ in range(500):
            counter("api.suggestions.error")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(bump, range(8)))

    assert get_counter("api.suggestions.error") == 8 * 500


def test_empty_stats():
    assert get_latency_stats("unknown")["count"] == 0


def test_reset():
    counter("x")
    with time_block("y"):
        pass
    reset_telemetry()
    assert get_counters() == {}
    assert latency_metrics() == []
