"""Explorer REST routes.

Combines the address, transaction, block and status sub-routers.
"""

from fastapi import APIRouter

from addrindex.api.routes.addresses import router as addresses_router
from addrindex.api.routes.blocks import router as blocks_router
from addrindex.api.routes.status import router as status_router
from addrindex.api.routes.transactions import router as transactions_router

router = APIRouter()

router.include_router(addresses_router)
router.include_router(transactions_router)
router.include_router(blocks_router)
router.include_router(status_router)

__all__ = ["router"]
