from __future__ import annotations

from pathlib import Path

import duckdb
import pytest

from alpacadata.core.config.settings import AlpacaConfig, StorageConfig
from alpacadata.core.data.storage.duckdb_factory import DuckDBFactory, DuckDBFactoryConfig


def test_connection_factory_context_yields_and_closes_connection() -> None:
    factory = DuckDBFactory()

    with factory.connection() as conn:
        assert conn.execute("SELECT 1").fetchone()[0] == 1

    with pytest.raises(duckdb.Error):
        conn.execute("SELECT 1")


def test_connection_factory_applies_pragmas() -> None:
    factory = DuckDBFactory(DuckDBFactoryConfig(pragmas={"threads": 3}))

    with factory.connection() as conn:
        threads = conn.execute("SELECT current_setting('threads')").fetchone()[0]

    assert threads == 3


def test_file_database_creates_parent_directory(tmp_path: Path) -> None:
    database = tmp_path / "nested" / "bars.duckdb"
    factory = DuckDBFactory(DuckDBFactoryConfig(database=database))

    with factory.connection() as conn:
        conn.execute("SELECT 1")

    assert database.exists()


def test_from_config_uses_storage_database() -> None:
    config = AlpacaConfig(storage=StorageConfig(database="/tmp/x.duckdb"))
    assert DuckDBFactoryConfig.from_config(config).database == "/tmp/x.duckdb"
