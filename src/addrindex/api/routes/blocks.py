"""Block endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request  # noqa: TC002
from fastapi.responses import JSONResponse
from starlette.responses import Response  # noqa: TC002

from addrindex.api.caching import cached
from addrindex.api.dependencies import get_engine
from addrindex.engine.client import ExplorerEngine  # noqa: TC001

router = APIRouter(tags=["block"])


@router.get("/block/{block_hash}")
@cached("block")
async def get_block(
    block_hash: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    return JSONResponse(await engine.block_service.block(block_hash))


@router.get("/block-index/{height}")
@cached("block_index")
async def get_block_index(
    height: int,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    return JSONResponse(await engine.block_service.block_hash(height))


@router.get("/blocks")
async def list_blocks(
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 10,
) -> dict:
    """Recent blocks of the last 24 hours, newest first."""
    return await engine.block_service.recent_blocks(limit)
