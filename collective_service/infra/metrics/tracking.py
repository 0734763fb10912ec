"""Helper functions for recording cache metrics."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from collective_service.infra.metrics import prometheus

if TYPE_CHECKING:
    from collections.abc import Iterator


@contextmanager
def track_cache_operation(cache_name: str, operation: str) -> Iterator[None]:
    """Time a cache operation, whether it succeeds or fails.

    Example:
        with track_cache_operation("redis", "get"):
            value = await provider.get(key)
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        prometheus.cache_operation_duration_seconds.labels(
            operation=operation,
            cache_name=cache_name,
        ).observe(time.perf_counter() - start_time)


def track_cache_lookup(cache_name: str, hit: bool) -> None:
    """Count a read as a hit or a miss."""
    if hit:
        prometheus.cache_hits_total.labels(cache_name=cache_name).inc()
    else:
        prometheus.cache_misses_total.labels(cache_name=cache_name).inc()


def track_cache_error(cache_name: str, operation: str, error_kind: str) -> None:
    """Count a provider failure that the facade recovered from."""
    prometheus.cache_errors_total.labels(
        cache_name=cache_name,
        operation=operation,
        error_kind=error_kind,
    ).inc()


def track_eviction(cache_name: str, size: int) -> None:
    """Record an LRU eviction and the resulting entry count."""
    prometheus.cache_evictions_total.labels(cache_name=cache_name).inc()
    prometheus.cache_entries.labels(cache_name=cache_name).set(size)


def update_cache_size(cache_name: str, size: int) -> None:
    prometheus.cache_entries.labels(cache_name=cache_name).set(size)


def track_purge_step(step: str, success: bool) -> None:
    """Count one step of an account purge."""
    prometheus.cache_purges_total.labels(
        step=step,
        status="success" if success else "failure",
    ).inc()


def track_invalidated_keys(count: int) -> None:
    if count:
        prometheus.cache_invalidated_keys_total.inc(count)
