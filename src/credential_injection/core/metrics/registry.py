"""Meter registry protocol and default in-memory implementation.

Header building reports counters (builds, failures, secret misses) and
timers (build duration). Tags carry endpoint and container names only.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MeterRegistry(Protocol):
    """Protocol for recording metrics.

    All methods must be safe to call from multiple threads.
    """

    def counter(
        self,
        name: str,
        value: float = 1.0,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric.

        Args:
            name: Metric name (e.g. ``"cie_headers_built"``).
            value: Amount to increment by.
            tags: Optional key-value tags for dimensionality.
        """
        ...

    def timer(
        self,
        name: str,
        duration_ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a timing measurement in milliseconds."""
        ...

    def get_metrics(self) -> dict[str, Any]:
        """Return a snapshot of all recorded metrics."""
        ...


def _tag_key(tags: dict[str, str] | None) -> str:
    if not tags:
        return ""
    return ",".join(f"{k}={v}" for k, v in sorted(tags.items()))


@dataclass
class _TimerEntry:
    total_ms: float = 0.0
    count: int = 0


class InMemoryRegistry:
    """Thread-safe in-memory metrics registry.

    The default registry when no external backend is configured, and the
    one used in tests.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, dict[str, float]] = {}
        self._timers: dict[str, dict[str, _TimerEntry]] = {}

    def counter(
        self,
        name: str,
        value: float = 1.0,
        tags: dict[str, str] | None = None,
    ) -> None:
        key = _tag_key(tags)
        with self._lock:
            bucket = self._counters.setdefault(name, {})
            bucket[key] = bucket.get(key, 0.0) + value

    def timer(
        self,
        name: str,
        duration_ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        key = _tag_key(tags)
        with self._lock:
            entry = self._timers.setdefault(name, {}).setdefault(key, _TimerEntry())
            entry.total_ms += duration_ms
            entry.count += 1

    def get_metrics(self) -> dict[str, Any]:
        """Return ``{"counters": ..., "timers": ...}`` keyed by metric name then tag key."""
        with self._lock:
            return {
                "counters": {name: dict(buckets) for name, buckets in self._counters.items()},
                "timers": {
                    name: {key: {"total_ms": e.total_ms, "count": e.count} for key, e in buckets.items()}
                    for name, buckets in self._timers.items()
                },
            }

    def get_counter(self, name: str, tags: dict[str, str] | None = None) -> float:
        """Return the current counter value, or ``0.0`` if never incremented."""
        key = _tag_key(tags)
        with self._lock:
            return self._counters.get(name, {}).get(key, 0.0)

    def get_timer_count(self, name: str, tags: dict[str, str] | None = None) -> int:
        """Return the number of timer recordings, or ``0`` if none."""
        key = _tag_key(tags)
        with self._lock:
            entry = self._timers.get(name, {}).get(key)
            return entry.count if entry else 0

    def reset(self) -> None:
        """Clear all recorded metrics."""
        with self._lock:
            self._counters.clear()
            self._timers.clear()
