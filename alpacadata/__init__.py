"""alpacadata - Alpaca market data fetching and storage.

Fetches latest and historical stock bars and quotes from the Alpaca data API,
walking paginated responses to completion, and persists bars idempotently in
DuckDB.
"""

from alpacadata.core.client.client import MarketDataClient
from alpacadata.core.config.settings import AlpacaConfig, ConfigManager
from alpacadata.core.data.repositories.bars import BarRepository
from alpacadata.core.models.base import Bar, Quote, QuotePair
from alpacadata.core.models.market import QuoteSide, TimeFrame
from alpacadata.core.models.page import PageResult
from alpacadata.core.services.ingestion import BarIngestionService, IngestionResult

__version__ = "0.1.0"

__all__ = [
    "AlpacaConfig",
    "Bar",
    "BarIngestionService",
    "BarRepository",
    "ConfigManager",
    "IngestionResult",
    "MarketDataClient",
    "PageResult",
    "Quote",
    "QuotePair",
    "QuoteSide",
    "TimeFrame",
    "__version__",
]
