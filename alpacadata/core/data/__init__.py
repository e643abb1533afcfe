"""Data persistence layer."""

from alpacadata.core.data.repositories import BarRepository
from alpacadata.core.data.schema import BARS_TABLE, TableSchema, ensure_market_data_tables
from alpacadata.core.data.storage import DuckDBFactory, DuckDBFactoryConfig

__all__ = [
    "BARS_TABLE",
    "BarRepository",
    "DuckDBFactory",
    "DuckDBFactoryConfig",
    "TableSchema",
    "ensure_market_data_tables",
]
