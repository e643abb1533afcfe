"""Bar repository backed by DuckDB."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import duckdb
from duckdb import DuckDBPyConnection

from alpacadata.core.data.schema import BARS_TABLE
from alpacadata.core.endpoints import as_utc
from alpacadata.core.exceptions.base import StorageError
from alpacadata.core.logging import get_logger
from alpacadata.core.models.base import Bar

logger = get_logger(__name__)

_COLUMNS = ", ".join(BARS_TABLE.column_names)
_PLACEHOLDERS = ", ".join("?" for _ in BARS_TABLE.column_names)

# first write wins: a second bar for the same (symbol, timestamp) is dropped
INSERT_BAR_SQL = f"""
    INSERT INTO {BARS_TABLE.name} ({_COLUMNS})
    VALUES ({_PLACEHOLDERS})
    ON CONFLICT (symbol, timestamp) DO NOTHING
"""

EXISTS_BAR_SQL = f"SELECT COUNT(*) FROM {BARS_TABLE.name} WHERE symbol = ? AND timestamp = ?"

SELECT_BARS_BY_SYMBOL_SQL = f"""
    SELECT {_COLUMNS}
    FROM {BARS_TABLE.name}
    WHERE symbol = ? AND timestamp BETWEEN ? AND ?
    ORDER BY timestamp
"""


def _to_db_timestamp(value: datetime) -> datetime:
    # stored as naive UTC
    return as_utc(value).replace(tzinfo=None)


def _row_to_bar(row: tuple[Any, ...]) -> Bar:
    symbol, timestamp, open_, high, low, close, volume, trade_count, vwap = row
    return Bar(
        symbol=symbol,
        timestamp=timestamp.replace(tzinfo=UTC),
        open=open_,
        high=high,
        low=low,
        close=close,
        volume=volume,
        trade_count=trade_count,
        vwap=vwap,
    )


class BarRepository:
    """Idempotent writer and range reader for bars."""

    def __init__(self, connection: DuckDBPyConnection, ensure_schema: bool = True):
        """Wrap an open DuckDB connection, creating the bars table when asked."""
        self.connection = connection
        if ensure_schema:
            self.ensure_schema()

    def ensure_schema(self) -> None:
        """Create the bars table and its (symbol, timestamp) index if absent."""
        try:
            BARS_TABLE.ensure(self.connection)
        except duckdb.Error as exc:
            raise StorageError(f"Failed to create {BARS_TABLE.name}: {exc}", table=BARS_TABLE.name) from exc

    async def upsert_bar(self, bar: Bar) -> bool:
        """Insert ``bar`` unless its (symbol, timestamp) already exists.

        Returns:
            True when a new row was written, False when an existing row won.
        """
        timestamp = _to_db_timestamp(bar.timestamp)
        try:
            existing = self.connection.execute(EXISTS_BAR_SQL, [bar.symbol, timestamp]).fetchone()[0]
            if existing:
                return False
            self.connection.execute(
                INSERT_BAR_SQL,
                [
                    bar.symbol,
                    timestamp,
                    bar.open,
                    bar.high,
                    bar.low,
                    bar.close,
                    bar.volume,
                    bar.trade_count,
                    bar.vwap,
                ],
            )
        except duckdb.Error as exc:
            raise StorageError(
                f"Failed to upsert bar {bar.symbol} @ {bar.timestamp.isoformat()}: {exc}",
                table=BARS_TABLE.name,
            ) from exc
        return True

    async def upsert_bars(self, bars: Iterable[Bar]) -> int:
        """Upsert each bar in turn and return how many rows were newly written.

        Rows written before a failure stay committed.
        """
        written = 0
        for bar in bars:
            if await self.upsert_bar(bar):
                written += 1
        return written

    async def get_bars_by_symbol(self, symbol: str, start: datetime, end: datetime) -> list[Bar]:
        """Bars for ``symbol`` with ``start <= timestamp <= end``, oldest first."""
        try:
            rows = self.connection.execute(
                SELECT_BARS_BY_SYMBOL_SQL,
                [symbol, _to_db_timestamp(start), _to_db_timestamp(end)],
            ).fetchall()
        except duckdb.Error as exc:
            raise StorageError(f"Failed to read bars for {symbol}: {exc}", table=BARS_TABLE.name) from exc
        return [_row_to_bar(row) for row in rows]

    async def count_bars(self, symbol: str | None = None) -> int:
        """Number of stored bars, optionally for one symbol."""
        try:
            if symbol is None:
                result = self.connection.execute(f"SELECT COUNT(*) FROM {BARS_TABLE.name}").fetchone()
            else:
                result = self.connection.execute(
                    f"SELECT COUNT(*) FROM {BARS_TABLE.name} WHERE symbol = ?", [symbol]
                ).fetchone()
        except duckdb.Error as exc:
            raise StorageError(f"Failed to count bars: {exc}", table=BARS_TABLE.name) from exc
        return int(result[0])

    def close(self) -> None:
        """Close the database connection."""
        self.connection.close()


__all__ = ["BarRepository", "INSERT_BAR_SQL", "SELECT_BARS_BY_SYMBOL_SQL"]
