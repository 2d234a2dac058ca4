"""Spot price feed.

Polls three public price providers for the USD price of one coin and keeps
the latest results as an immutable snapshot. A provider that fails for any
reason reports ``0.0``; one bad provider never hides the others.

Providers:
- Bitstamp ticker (``last``), reported under ``binance``
- blockchain.info ``tobtc`` (coins per 1000 USD, inverted)
- Coinbase spot price (``data.amount``)
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

BITSTAMP_TICKER_URL = "https://www.bitstamp.net/api/ticker/"
BLOCKCHAIN_INFO_URL = "https://blockchain.info/tobtc"
COINBASE_SPOT_URL = "https://api.coinbase.com/v2/prices/spot"


@dataclass(frozen=True)
class CurrencyData:
    """Latest USD price from each provider (``0.0`` = unavailable)."""

    binance: float = 0.0
    blockchain_info: float = 0.0
    coinbase: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "binance": self.binance,
            "blockchainInfo": self.blockchain_info,
            "coinbase": self.coinbase,
            "status": 200,
        }


class PriceFeed:
    """Lock-guarded price snapshot refreshed from the providers.

    Usage::

        feed = PriceFeed(timeout=10)
        await feed.connect()
        await feed.refresh()
        feed.snapshot().to_dict()
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the feed.

        Args:
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests inject a mock here).
        """
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._lock = threading.Lock()
        self._data = CurrencyData()

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    def snapshot(self) -> CurrencyData:
        """Return the latest prices."""
        with self._lock:
            return self._data

    async def refresh(self) -> CurrencyData:
        """Query every provider and swap in the new snapshot.

        Raises:
            RuntimeError: If the feed is not connected.
        """
        if self._client is None:
            msg = "Price feed not connected. Call connect() first."
            raise RuntimeError(msg)

        binance, blockchain_info, coinbase = await asyncio.gather(
            self._bitstamp_price(),
            self._blockchain_info_price(),
            self._coinbase_price(),
        )
        data = CurrencyData(binance=binance, blockchain_info=blockchain_info, coinbase=coinbase)
        with self._lock:
            self._data = data
        return data

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    async def _bitstamp_price(self) -> float:
        try:
            body = await self._get_json(BITSTAMP_TICKER_URL)
            return float(body["last"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed updating binance price: %s", exc)
            return 0.0

    async def _blockchain_info_price(self) -> float:
        assert self._client is not None
        try:
            response = await self._client.get(
                BLOCKCHAIN_INFO_URL, params={"currency": "usd", "value": 1000}
            )
            response.raise_for_status()
            coins_per_thousand = float(response.text.strip())
            return (1 / coins_per_thousand) * 1000
        except (httpx.HTTPError, ValueError, ZeroDivisionError) as exc:
            logger.warning("Failed updating blockchain.info price: %s", exc)
            return 0.0

    async def _coinbase_price(self) -> float:
        try:
            body = await self._get_json(
                COINBASE_SPOT_URL,
                params={"currency": "USD"},
                headers={"CB-VERSION": "2015-04-08"},
            )
            return float(body["data"]["amount"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed updating coinbase price: %s", exc)
            return 0.0

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        assert self._client is not None
        response = await self._client.get(url, **kwargs)
        response.raise_for_status()
        return response.json()
