"""Metrics collector: Prometheus counters, gauges, histograms.

Exposed series:
- ``addrindex_cache_requests_total`` counter (result = hit, miss, bypass)
- ``addrindex_node_rpc_duration_seconds`` histogram (method)
- ``addrindex_node_rpc_errors_total`` counter (method)
- ``addrindex_cron_histogram``
- ``addrindex_cron_last_execution_gauge``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "addrindex"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`ExplorerMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class ExplorerMetrics:
    """High-level explorer metrics.

    All histograms track operation duration in seconds.
    """

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._cache_requests = self._collector.counter(
            f"{_PREFIX}_cache_requests",
            "Response cache lookups by result",
            ("result",),
        )

        self._rpc_duration = self._collector.histogram(
            f"{_PREFIX}_node_rpc_duration_seconds",
            "Duration of full node JSON-RPC calls",
            ("method",),
        )
        self._rpc_errors = self._collector.counter(
            f"{_PREFIX}_node_rpc_errors",
            "Failed full node JSON-RPC calls",
            ("method",),
        )

        self._cron_histogram = self._collector.histogram(
            f"{_PREFIX}_cron_histogram",
            "Duration of cron job executions",
            ("job_name",),
        )
        self._cron_last = self._collector.gauge(
            f"{_PREFIX}_cron_last_execution_gauge",
            "Timestamp of last cron execution",
            ("job_name",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_cache(self, result: str) -> None:
        """Count one cache lookup (``hit``, ``miss`` or ``bypass``)."""
        self._cache_requests.labels(result=result).inc()

    @contextmanager
    def track_rpc(self, method: str) -> Iterator[None]:
        """Track the duration of a node RPC; exceptions are counted as errors."""
        start = time.monotonic()
        try:
            yield
        except Exception:
            self._rpc_errors.labels(method=method).inc()
            raise
        finally:
            self._rpc_duration.labels(method=method).observe(time.monotonic() - start)

    @contextmanager
    def track_cron(self, job_name: str) -> Iterator[None]:
        """Track the duration of a cron job and record last execution time."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._cron_histogram.labels(job_name=job_name).observe(time.monotonic() - start)
            self._cron_last.labels(job_name=job_name).set(time.time())
