"""Shared test fixtures for py-addrindex test suite."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from addrindex.config.settings import (
    AppConfig,
    CacheConfig,
    CacheEngine,
    MetricsConfig,
    NodeConfig,
    PricesConfig,
    TaskConfig,
)


class FakeNode:
    """JSON-RPC node double for ``httpx.MockTransport``.

    ``results`` maps a method name to its result, or to a callable taking the
    params list and returning the result. ``errors`` maps a method name to
    the error message the node answers with.
    """

    def __init__(self) -> None:
        self.results: dict[str, Any] = {}
        self.errors: dict[str, str] = {}
        self.calls: list[tuple[str, list[Any]]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method, params = payload["method"], payload.get("params", [])
        self.calls.append((method, params))

        if method in self.errors:
            error = {"code": -5, "message": self.errors[method]}
            return httpx.Response(500, json={"result": None, "error": error, "id": payload["id"]})
        if method not in self.results:
            error = {"code": -32601, "message": "Method not found"}
            return httpx.Response(404, json={"result": None, "error": error, "id": payload["id"]})

        result = self.results[method]
        if callable(result):
            result = result(params)
        return httpx.Response(200, json={"result": result, "error": None, "id": payload["id"]})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


@pytest.fixture
def fake_node() -> FakeNode:
    """Provide an empty fake node; tests fill in ``results``."""
    return FakeNode()


@pytest.fixture
def app_config() -> AppConfig:
    """Provide a test AppConfig with safe defaults (no network, no background jobs)."""
    return AppConfig(
        debug=True,
        version="1.2.3",
        commit="abc123",
        branch="main",
        node=NodeConfig(host="node.test:8332", user="rpc", password="secret"),
        cache=CacheConfig(engine=CacheEngine.MEMORY, max_entries=100),
        prices=PricesConfig(enabled=False),
        task=TaskConfig(enabled=False),
        metrics=MetricsConfig(enabled=True),
    )


@pytest.fixture
def test_client(app_config, fake_node):
    """Provide a started FastAPI TestClient talking to the fake node."""
    from fastapi.testclient import TestClient

    from addrindex.api.app import create_app

    app = create_app(config=app_config, node_transport=fake_node.transport())
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
