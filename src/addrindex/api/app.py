"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from addrindex import __version__
from addrindex.api.middleware.cors import setup_cors
from addrindex.api.routes import router
from addrindex.config.settings import AppConfig
from addrindex.engine.client import ExplorerEngine
from addrindex.errors import AddrIndexError
from addrindex.metrics.collector import ExplorerMetrics
from addrindex.metrics.middleware import PrometheusMiddleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import httpx

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Initialises the engine (node client, cache, price feed, background jobs)
    on startup and gracefully shuts it down on exit.
    """
    config: AppConfig = app.state.config
    engine = ExplorerEngine(
        config,
        metrics=app.state.metrics,
        node_transport=app.state.node_transport,
        price_transport=app.state.price_transport,
    )

    try:
        await engine.initialize()
        app.state.engine = engine
        app.state.response_cache = engine.response_cache
        logger.info("Explorer engine ready on %s:%d", config.server.host, config.server.port)
        yield
    finally:
        app.state.response_cache = None
        await engine.close()


def create_app(
    *,
    config: AppConfig | None = None,
    node_transport: httpx.AsyncBaseTransport | None = None,
    price_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        node_transport: Optional httpx transport for node RPC (tests).
        price_transport: Optional httpx transport for the price providers (tests).
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="py-addrindex",
        version=__version__,
        description="Address index explorer API over a full node",
        lifespan=_lifespan,
    )

    # Store config and injected collaborators on app.state for lifespan access
    app.state.config = config
    app.state.node_transport = node_transport
    app.state.price_transport = price_transport
    app.state.metrics = ExplorerMetrics() if config.metrics.enabled else None
    app.state.response_cache = None

    # -- Middleware --
    setup_cors(app)
    if app.state.metrics is not None:
        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    # -- Error handlers --
    @app.exception_handler(AddrIndexError)
    async def _addrindex_error_handler(request: Request, exc: AddrIndexError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"message": "invalid request", "error": errors},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        metrics = app.state.metrics
        body = generate_latest(metrics.registry) if metrics is not None else b""
        return Response(
            content=body,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    # -- Explorer API --
    app.include_router(router)

    return app
