"""ExplorerEngine: central engine client owning all services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from addrindex.cache.response import ResponseCache
    from addrindex.config.settings import AppConfig
    from addrindex.engine.services.address_service import AddressService
    from addrindex.engine.services.block_service import BlockService
    from addrindex.engine.services.status_service import StatusService
    from addrindex.engine.services.transaction_service import TransactionService
    from addrindex.metrics.collector import ExplorerMetrics
    from addrindex.node.client import NodeClient
    from addrindex.prices.feed import PriceFeed
    from addrindex.taskmanager.manager import TaskManager

logger = logging.getLogger(__name__)

# Error messages
_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


class ExplorerEngine:
    """Central engine that owns the node client, cache, price feed and services.

    Provides lifecycle management and a service registry; route handlers
    reach everything through ``app.state.engine``.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        metrics: ExplorerMetrics | None = None,
        node_transport: httpx.AsyncBaseTransport | None = None,
        price_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration.
            metrics: Metrics sink shared with the HTTP layer.
            node_transport: Optional httpx transport for the node client.
            price_transport: Optional httpx transport for the price feed.
        """
        self._config = config
        self._metrics = metrics
        self._node_transport = node_transport
        self._price_transport = price_transport
        self._initialized = False

        # Infrastructure components
        self._node: NodeClient | None = None
        self._response_cache: ResponseCache | None = None
        self._price_feed: PriceFeed | None = None
        self._task_manager: TaskManager | None = None

        # Services
        self._address_service: AddressService | None = None
        self._transaction_service: TransactionService | None = None
        self._block_service: BlockService | None = None
        self._status_service: StatusService | None = None

    async def initialize(self) -> None:
        """Connect the node client, cache and price feed, and start background jobs.

        Raises:
            RuntimeError: If already initialized.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        # Import here to avoid circular deps
        from addrindex.cache.client import new_storage
        from addrindex.cache.response import ResponseCache
        from addrindex.node.client import NodeClient

        self._node = NodeClient(
            self._config.node,
            transport=self._node_transport,
            metrics=self._metrics,
        )
        await self._node.connect()

        storage = new_storage(self._config.cache)
        await storage.connect()
        self._response_cache = ResponseCache(storage, metrics=self._metrics)

        # Initialize services
        from addrindex.engine.services.address_service import AddressService
        from addrindex.engine.services.block_service import BlockService
        from addrindex.engine.services.status_service import StatusService
        from addrindex.engine.services.transaction_service import TransactionService

        self._transaction_service = TransactionService(self)
        self._address_service = AddressService(self)
        self._block_service = BlockService(self)
        self._status_service = StatusService(self)

        # Initialize price feed
        from addrindex.prices.feed import PriceFeed

        if self._config.prices.enabled:
            self._price_feed = PriceFeed(
                timeout=self._config.prices.timeout,
                transport=self._price_transport,
            )
            await self._price_feed.connect()
            await self._price_feed.refresh()

        # Initialize task manager and register cron jobs
        from addrindex.taskmanager.manager import CronJob, TaskManager

        if self._config.task.enabled:
            self._task_manager = TaskManager(metrics=self._metrics)
            self._task_manager.register(
                "refresh_blocks",
                CronJob(
                    handler=self._block_service.refresh,
                    period=self._config.task.blocks_refresh_period,
                ),
            )
            if self._price_feed is not None:
                self._task_manager.register(
                    "refresh_prices",
                    CronJob(
                        handler=self._refresh_prices,
                        period=self._config.prices.refresh_period,
                    ),
                )
            await self._task_manager.start()

        self._initialized = True
        logger.info("Explorer engine initialized (node %s)", self._config.node.host)

    async def close(self) -> None:
        """Gracefully shut down all services and connections.

        Can be called multiple times (idempotent).
        """
        if not self._initialized:
            return

        # Stop task manager first (depends on services)
        if self._task_manager is not None:
            await self._task_manager.stop()
            self._task_manager = None

        # Tear down services
        self._address_service = None
        self._transaction_service = None
        self._block_service = None
        self._status_service = None

        if self._price_feed is not None:
            await self._price_feed.close()
            self._price_feed = None

        if self._response_cache is not None:
            await self._response_cache.storage.close()
            self._response_cache = None

        if self._node is not None:
            await self._node.close()
            self._node = None

        self._initialized = False
        logger.info("Explorer engine shut down")

    async def _refresh_prices(self) -> None:
        if self._price_feed is not None:
            await self._price_feed.refresh()

    @property
    def is_initialized(self) -> bool:
        """Check if the engine is initialized."""
        return self._initialized

    @property
    def config(self) -> AppConfig:
        """Get the application configuration."""
        return self._config

    @property
    def node(self) -> NodeClient:
        """Get the full node client.

        Raises:
            RuntimeError: If engine not initialized.
        """
        if self._node is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._node

    @property
    def response_cache(self) -> ResponseCache:
        """Get the response cache.

        Raises:
            RuntimeError: If engine not initialized.
        """
        if self._response_cache is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._response_cache

    @property
    def address_service(self) -> AddressService:
        """Get the address service."""
        if self._address_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._address_service

    @property
    def transaction_service(self) -> TransactionService:
        """Get the transaction service."""
        if self._transaction_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._transaction_service

    @property
    def block_service(self) -> BlockService:
        """Get the block service."""
        if self._block_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._block_service

    @property
    def status_service(self) -> StatusService:
        """Get the status service."""
        if self._status_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._status_service

    @property
    def price_feed(self) -> PriceFeed | None:
        """Get the price feed (None if not enabled)."""
        return self._price_feed

    @property
    def metrics(self) -> ExplorerMetrics | None:
        """Get the explorer metrics (None if not configured)."""
        return self._metrics

    @property
    def task_manager(self) -> TaskManager | None:
        """Get the task manager (None if not enabled)."""
        return self._task_manager

    async def health_check(self) -> dict[str, str]:
        """Check health status of all engine components.

        Returns:
            Dictionary with component statuses ('ok', 'error', 'not_initialized').
        """
        status = {
            "engine": "ok" if self._initialized else "not_initialized",
            "node": "unknown",
            "cache": "unknown",
        }
        if self._initialized:
            status["node"] = "ok" if self._node and self._node.is_connected else "error"
            status["cache"] = "ok" if self._response_cache is not None else "error"
        return status
