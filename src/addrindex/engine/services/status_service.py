"""Status service: node info, sync progress and build version."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from addrindex.errors import reraise_as

if TYPE_CHECKING:
    from addrindex.engine.client import ExplorerEngine

SERVER_TYPE = "addrindex-server"


class StatusService:
    """Business logic for ``/status``, ``/sync`` and ``/version``."""

    def __init__(self, engine: ExplorerEngine) -> None:
        self._engine = engine

    async def status(self, query: str = "getInfo") -> dict[str, Any]:
        """Answer a ``/status?q=`` query; unknown queries fall back to ``getInfo``."""
        node = self._engine.node
        if query == "getDifficulty":
            with reraise_as("failed to getDifficulty"):
                return {"difficulty": await node.get_difficulty()}
        if query == "getBestBlockHash":
            with reraise_as("failed to getBestBlockHash"):
                return {"bestblockhash": await node.get_best_block_hash()}
        with reraise_as("failed to getInfo"):
            return await node.get_info()

    async def sync(self) -> dict[str, Any]:
        """Block download progress of the node."""
        with reraise_as("error fetching blockchain info"):
            info = await self._engine.node.get_blockchain_info()
        return {
            "status": "finished" if info.synced else "syncing",
            "blockChainHeight": info.blocks,
            "syncPercentage": info.sync_percentage,
            "height": info.headers,
            "error": None,
            "type": SERVER_TYPE,
        }

    def version(self) -> dict[str, str]:
        config = self._engine.config
        return {"version": config.version, "commit": config.commit, "branch": config.branch}
