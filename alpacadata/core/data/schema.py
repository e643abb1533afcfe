"""Schema definitions for persisted market data."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


@dataclass(frozen=True)
class ColumnDef:
    """Represents a DuckDB table column definition."""

    name: str
    data_type: str
    constraints: Sequence[str] = ()

    def render(self) -> str:
        parts = [self.name, self.data_type, *self.constraints]
        return " ".join(parts)


@dataclass(frozen=True)
class IndexDef:
    """Secondary index on a table."""

    name: str
    columns: Sequence[str]

    def create_ddl(self, table: str) -> str:
        return f"CREATE INDEX IF NOT EXISTS {self.name} ON {table} ({', '.join(self.columns)})"


@dataclass(frozen=True)
class TableSchema:
    """Utility wrapper describing a DuckDB table schema."""

    name: str
    columns: Sequence[ColumnDef]
    primary_key: Sequence[str] = ()
    indexes: Sequence[IndexDef] = ()

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def create_ddl(self) -> str:
        column_defs: list[str] = [column.render() for column in self.columns]
        if self.primary_key:
            pk_cols = ", ".join(self.primary_key)
            column_defs.append(f"PRIMARY KEY ({pk_cols})")
        columns_sql = ",\n                ".join(column_defs)
        return f"""
            CREATE TABLE IF NOT EXISTS {self.name} (
                {columns_sql}
            )
            """.strip()

    def ensure(self, conn: DuckDBPyConnection) -> None:
        """Create the table and its indexes on the provided connection if they do not exist."""

        conn.execute(self.create_ddl())
        for index in self.indexes:
            conn.execute(index.create_ddl(self.name))


BARS_TABLE = TableSchema(
    name="bars",
    columns=(
        ColumnDef("symbol", "VARCHAR", ("NOT NULL",)),
        ColumnDef("timestamp", "TIMESTAMP", ("NOT NULL",)),
        ColumnDef("open", "DECIMAL(18, 6)", ("NOT NULL",)),
        ColumnDef("high", "DECIMAL(18, 6)", ("NOT NULL",)),
        ColumnDef("low", "DECIMAL(18, 6)", ("NOT NULL",)),
        ColumnDef("close", "DECIMAL(18, 6)", ("NOT NULL",)),
        ColumnDef("volume", "BIGINT", ("NOT NULL",)),
        ColumnDef("trade_count", "INTEGER", ("NOT NULL",)),
        ColumnDef("vwap", "DECIMAL(18, 6)", ("NOT NULL",)),
    ),
    primary_key=("symbol", "timestamp"),
    indexes=(IndexDef("idx_bars_symbol_timestamp", ("symbol", "timestamp")),),
)


def market_data_tables() -> Sequence[TableSchema]:
    """Return the schemas persisted by alpacadata."""

    return (BARS_TABLE,)


def ensure_market_data_tables(conn: DuckDBPyConnection) -> None:
    """Create all market data tables on the provided DuckDB connection."""

    for table in market_data_tables():
        table.ensure(conn)


__all__ = [
    "BARS_TABLE",
    "ColumnDef",
    "IndexDef",
    "TableSchema",
    "ensure_market_data_tables",
    "market_data_tables",
]
