"""Client module."""

from alpacadata.core.client.client import MarketDataClient

__all__ = ["MarketDataClient"]
