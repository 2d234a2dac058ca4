"""Node status, sync progress, version and price endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request  # noqa: TC002
from fastapi.responses import JSONResponse
from starlette.responses import Response  # noqa: TC002

from addrindex.api.caching import cached
from addrindex.api.dependencies import get_engine
from addrindex.engine.client import ExplorerEngine  # noqa: TC001
from addrindex.prices.feed import CurrencyData

router = APIRouter(tags=["status"])


@router.get("/status")
@cached("status")
async def get_status(
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
    q: str = "getInfo",
) -> Response:
    """``getInfo`` (default), ``getDifficulty`` or ``getBestBlockHash``."""
    return JSONResponse(await engine.status_service.status(q))


@router.get("/sync")
@cached("sync")
async def get_sync(
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    return JSONResponse(await engine.status_service.sync())


@router.get("/version")
async def get_version(
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> dict[str, str]:
    return engine.status_service.version()


@router.get("/currency")
async def get_currency(
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> dict:
    """Latest spot prices; all zero when the price feed is disabled."""
    feed = engine.price_feed
    data = feed.snapshot() if feed is not None else CurrencyData()
    return data.to_dict()
