"""Transaction endpoints.

Transaction lookup, paginated listings, relay and message verification.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request  # noqa: TC002
from fastapi.responses import JSONResponse
from starlette.responses import Response  # noqa: TC002

from addrindex.api.caching import cached
from addrindex.api.dependencies import get_engine
from addrindex.api.schemas import TxSendRequest, VerifyMessageRequest  # noqa: TC001
from addrindex.engine.client import ExplorerEngine  # noqa: TC001
from addrindex.errors import ValidationError

router = APIRouter(tags=["transaction"])

_NEED_ONE = "Need to pass ?block=BLOCKHASH or ?address=ADDR"


@router.get("/txs")
@cached("transactions")
async def list_transactions(
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
    address: str | None = None,
    block: Annotated[list[str] | None, Query()] = None,
    page: Annotated[int, Query(ge=0)] = 0,
) -> Response:
    """One page (10 items, 0-based) of an address's or a block's transactions.

    Exactly one of ``address`` and ``block`` must be given. Address pages past
    the end are empty; block pages past the end are an error.
    """
    # An empty value counts as absent.
    block = [b for b in block or [] if b]
    if len(block) > 1:
        raise ValidationError("only one block accepted in query", error=f"got {len(block)}")
    if address and block:
        raise ValidationError(_NEED_ONE, error="got both address and block")

    if address:
        txs = await engine.address_service.transactions_page(address, page)
    elif block:
        txs = await engine.block_service.transactions_page(block[0], page)
    else:
        raise ValidationError(_NEED_ONE, error="missing query parameter")
    return JSONResponse(txs)


@router.get("/tx/{txid}")
@cached("transaction")
async def get_transaction(
    txid: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    return JSONResponse(await engine.transaction_service.transaction(txid))


@router.get("/rawtx/{txid}")
@cached("raw_transaction")
async def get_raw_transaction(
    txid: str,
    request: Request,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> Response:
    return JSONResponse(await engine.transaction_service.raw_transaction(txid))


@router.post("/tx/send")
async def send_transaction(
    body: TxSendRequest,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> dict[str, str]:
    """Relay a signed transaction to the node."""
    txid = await engine.transaction_service.send(body.tx)
    return {"txid": txid}


@router.post("/messages/verify")
async def verify_message(
    body: VerifyMessageRequest,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> bool:
    """Check a signed message against an address."""
    return await engine.transaction_service.verify_message(
        body.address, body.signature, body.message
    )
