"""DuckDB storage helpers."""

from alpacadata.core.data.storage.duckdb_factory import DuckDBFactory, DuckDBFactoryConfig

__all__ = ["DuckDBFactory", "DuckDBFactoryConfig"]
