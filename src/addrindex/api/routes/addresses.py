"""Address endpoints.

Unspent outputs, balances and the reconciled address summary.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request  # noqa: TC002
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.responses import Response  # noqa: TC002

from addrindex.api.caching import cached
from addrindex.api.dependencies import get_engine
from addrindex.engine.client import ExplorerEngine  # noqa: TC001

router = APIRouter(tags=["address"])


def _amount(value: int) -> Response:
    # Balances are returned as bare decimal integers.
    return PlainTextResponse(str(value))


@router.get("/addr/{addr}/utxo")
@cached("address_utxo")
async def address_utxo(
    addr: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    """Unspent outputs of *addr*, mempool included, least confirmed first."""
    unspent = await engine.address_service.unspent(addr)
    return JSONResponse([u.to_dict() for u in unspent])


@router.get("/addr/{addr}/balance")
@cached("address_balance")
async def address_balance(
    addr: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    totals = await engine.address_service.totals(addr)
    return _amount(totals.balance)


@router.get("/addr/{addr}/totalReceived")
@cached("address_balance")
async def address_total_received(
    addr: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    totals = await engine.address_service.totals(addr)
    return _amount(totals.received)


@router.get("/addr/{addr}/totalSent")
@cached("address_balance")
async def address_total_sent(
    addr: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    totals = await engine.address_service.totals(addr)
    return _amount(totals.sent)


@router.get("/addr/{addr}/unconfirmedBalance")
@cached("address_unconfirmed")
async def address_unconfirmed_balance(
    addr: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    return _amount(await engine.address_service.unconfirmed_balance(addr))


@router.get("/addr/{addr}")
@cached("address_summary")
async def address_summary(
    addr: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    """Balances, counts and unspent outputs reconciled from the full history."""
    view = await engine.address_service.summary(addr)
    return JSONResponse(view.to_dict())
