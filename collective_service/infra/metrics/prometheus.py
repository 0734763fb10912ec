"""Prometheus metrics for the cache layer."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Custom registry so tests and embedding apps control what gets exported
REGISTRY = CollectorRegistry()

# Cache calls are fast; covers 100µs to 1s
CACHE_LATENCY_BUCKETS = (
    0.0001,
    0.0005,
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
)

cache_hits_total = Counter(
    "cache_hits_total",
    "Total number of cache hits",
    ["cache_name"],
    registry=REGISTRY,
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total number of cache misses (including degraded reads)",
    ["cache_name"],
    registry=REGISTRY,
)

cache_errors_total = Counter(
    "cache_errors_total",
    "Total number of cache provider failures recovered by the facade",
    ["cache_name", "operation", "error_kind"],
    registry=REGISTRY,
)

cache_operation_duration_seconds = Histogram(
    "cache_operation_duration_seconds",
    "Cache operation duration in seconds",
    ["operation", "cache_name"],
    buckets=CACHE_LATENCY_BUCKETS,
    registry=REGISTRY,
)

cache_evictions_total = Counter(
    "cache_evictions_total",
    "Total number of entries evicted from the in-memory LRU provider",
    ["cache_name"],
    registry=REGISTRY,
)

cache_entries = Gauge(
    "cache_entries",
    "Number of entries currently held by the in-memory LRU provider",
    ["cache_name"],
    registry=REGISTRY,
)

cache_purges_total = Counter(
    "cache_purges_total",
    "Total number of account cache purge steps, by step and outcome",
    ["step", "status"],
    registry=REGISTRY,
)

cache_invalidated_keys_total = Counter(
    "cache_invalidated_keys_total",
    "Total number of GraphQL response cache keys deleted by account purges",
    registry=REGISTRY,
)
