"""Spot price snapshot served by ``/currency``."""

from addrindex.prices.feed import CurrencyData, PriceFeed

__all__ = ["CurrencyData", "PriceFeed"]
