"""alpacadata core modules."""

from alpacadata.core.client.client import MarketDataClient
from alpacadata.core.config.settings import AlpacaConfig, ConfigManager
from alpacadata.core.models.market import TimeFrame
from alpacadata.core.pagination import Paginator

__all__ = [
    "AlpacaConfig",
    "ConfigManager",
    "MarketDataClient",
    "Paginator",
    "TimeFrame",
]
