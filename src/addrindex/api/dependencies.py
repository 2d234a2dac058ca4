"""FastAPI dependency injection helpers.

Usage in a route::

    @router.get("/sync")
    async def sync(
        engine: Annotated[ExplorerEngine, Depends(get_engine)],
    ) -> ...:
        ...
"""

from __future__ import annotations

from fastapi import Request

from addrindex.engine.client import ExplorerEngine  # noqa: TC001
from addrindex.errors import AddrIndexError


def get_engine(request: Request) -> ExplorerEngine:
    """Retrieve the engine from ``app.state``.

    The engine is stored on ``app.state.engine`` during lifespan startup.

    Raises:
        AddrIndexError: 503 if the engine is not initialized (should never
        happen after startup).
    """
    engine: ExplorerEngine | None = getattr(request.app.state, "engine", None)
    if engine is None:
        raise AddrIndexError(
            "service unavailable",
            error="engine not initialized",
            status_code=503,
            code="not-initialized",
        )
    return engine
