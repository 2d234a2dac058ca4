"""Metrics: Prometheus metrics collection and exposure."""

from __future__ import annotations

from addrindex.metrics.collector import ExplorerMetrics, MetricsCollector

__all__ = ["ExplorerMetrics", "MetricsCollector"]
