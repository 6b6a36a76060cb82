"""
Sink counters for rotalog.

Sinks report what they do to a :class:`SinkTracer`. Two implementations
exist and one is chosen when the sink tree is built:

- :class:`NullSinkTracer`: every method is a no-op; used when metrics are
  disabled so sinks never branch on a missing tracer.
- :class:`MetricsCollector`: Prometheus-compatible counters kept in an
  isolated registry, plus in-memory totals for quick assertions in tests.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from prometheus_client import CollectorRegistry, Counter


@runtime_checkable
class SinkTracer(Protocol):
    def record_written(self, sink: str, nbytes: int) -> None:  # pragma: no cover
        ...

    def rotation(self, sink: str) -> None:  # pragma: no cover
        ...

    def rotation_failed(self, sink: str) -> None:  # pragma: no cover
        ...

    def archive_evicted(self, sink: str) -> None:  # pragma: no cover
        ...

    def write_failed(self, sink: str) -> None:  # pragma: no cover
        ...


class NullSinkTracer:
    """Tracer that records nothing."""

    def record_written(self, sink: str, nbytes: int) -> None:
        return None

    def rotation(self, sink: str) -> None:
        return None

    def rotation_failed(self, sink: str) -> None:
        return None

    def archive_evicted(self, sink: str) -> None:
        return None

    def write_failed(self, sink: str) -> None:
        return None


NULL_TRACER = NullSinkTracer()


@dataclass
class SinkMetrics:
    """Captured counters for quick assertions in tests."""

    records_written: int = 0
    bytes_written: int = 0
    rotations: int = 0
    rotation_failures: int = 0
    archives_evicted: int = 0
    write_failures: int = 0


class MetricsCollector:
    """Thread-safe sink counters exported through prometheus_client."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self._lock = threading.Lock()
        self._state = SinkMetrics()
        # Isolated registry avoids duplicate registration across instances
        self._registry = registry if registry is not None else CollectorRegistry()
        self._c_records = Counter(
            "rotalog_records_written_total",
            "Total number of records written by a sink",
            ["sink"],
            registry=self._registry,
        )
        self._c_bytes = Counter(
            "rotalog_bytes_written_total",
            "Total number of bytes written by a sink",
            ["sink"],
            registry=self._registry,
        )
        self._c_rotations = Counter(
            "rotalog_rotations_total",
            "Total number of completed file rotations",
            ["sink"],
            registry=self._registry,
        )
        self._c_rotation_failures = Counter(
            "rotalog_rotation_failures_total",
            "Total number of rotations that failed and fell back",
            ["sink"],
            registry=self._registry,
        )
        self._c_evicted = Counter(
            "rotalog_archives_evicted_total",
            "Total number of archives deleted by retention",
            ["sink"],
            registry=self._registry,
        )
        self._c_write_failures = Counter(
            "rotalog_write_failures_total",
            "Total number of records lost to write failures",
            ["sink"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Expose the isolated Prometheus registry."""
        return self._registry

    def record_written(self, sink: str, nbytes: int) -> None:
        with self._lock:
            self._state.records_written += 1
            self._state.bytes_written += nbytes
        self._c_records.labels(sink=sink).inc()
        self._c_bytes.labels(sink=sink).inc(nbytes)

    def rotation(self, sink: str) -> None:
        with self._lock:
            self._state.rotations += 1
        self._c_rotations.labels(sink=sink).inc()

    def rotation_failed(self, sink: str) -> None:
        with self._lock:
            self._state.rotation_failures += 1
        self._c_rotation_failures.labels(sink=sink).inc()

    def archive_evicted(self, sink: str) -> None:
        with self._lock:
            self._state.archives_evicted += 1
        self._c_evicted.labels(sink=sink).inc()

    def write_failed(self, sink: str) -> None:
        with self._lock:
            self._state.write_failures += 1
        self._c_write_failures.labels(sink=sink).inc()

    def snapshot(self) -> SinkMetrics:
        # Lightweight copy without exposing internals
        with self._lock:
            return SinkMetrics(**vars(self._state))


def create_tracer(*, enabled: bool) -> SinkTracer:
    """Pick the tracer implementation once, at construction time."""
    if enabled:
        return MetricsCollector()
    return NULL_TRACER
