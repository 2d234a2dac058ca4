"""Tests for the Prometheus request middleware."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from addrindex.metrics.middleware import PrometheusMiddleware


@pytest.fixture
def _app_with_metrics() -> tuple[FastAPI, CollectorRegistry]:
    registry = CollectorRegistry()
    app = FastAPI()
    app.add_middleware(PrometheusMiddleware, registry=registry)

    @app.get("/addr/{addr}")
    async def addr_endpoint(addr: str) -> dict[str, str]:
        return {"addr": addr}

    return app, registry


class TestPrometheusMiddleware:
    """Tests for PrometheusMiddleware."""

    def test_records_count_and_duration(self, _app_with_metrics: tuple) -> None:
        app, registry = _app_with_metrics
        client = TestClient(app)
        client.get("/addr/1A")
        metric_names = [m.name for m in registry.collect()]
        assert "http_request" in metric_names
        assert "http_request_duration_seconds" in metric_names

    def test_labels_by_route_template(self, _app_with_metrics: tuple) -> None:
        app, registry = _app_with_metrics
        client = TestClient(app)
        client.get("/addr/1A")
        client.get("/addr/1B")
        client.get("/addr/1C")
        value = registry.get_sample_value(
            "http_request_total",
            {"method": "GET", "path": "/addr/{addr}", "status_code": "200", "app": "addrindex"},
        )
        assert value == 3.0

    def test_unmatched_path_uses_raw_path(self, _app_with_metrics: tuple) -> None:
        app, registry = _app_with_metrics
        client = TestClient(app)
        client.get("/missing")
        value = registry.get_sample_value(
            "http_request_total",
            {"method": "GET", "path": "/missing", "status_code": "404", "app": "addrindex"},
        )
        assert value == 1.0
