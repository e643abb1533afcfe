"""Fetch historical bars and persist them through the bar repository."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from time import perf_counter
from typing import TYPE_CHECKING

from alpacadata.core.logging import get_logger, log_context
from alpacadata.core.models.market import TimeFrame

if TYPE_CHECKING:
    from alpacadata.core.client.client import MarketDataClient
    from alpacadata.core.data.repositories.bars import BarRepository

logger = get_logger(__name__)


@dataclass(slots=True)
class IngestionResult:
    symbols: list[str]
    timeframe: str
    fetched: int
    written: int
    duration_ms: float

    @property
    def duplicates_skipped(self) -> int:
        return self.fetched - self.written


class BarIngestionService:
    """Pull every page of historical bars and upsert them.

    Storage is first-write-wins, so re-running an ingest over an overlapping
    range only writes bars that were not stored before.
    """

    def __init__(self, client: MarketDataClient, repository: BarRepository) -> None:
        self.client = client
        self.repository = repository

    async def ingest(
        self,
        symbols: str | Sequence[str],
        timeframe: str | TimeFrame,
        start: datetime,
        end: datetime,
    ) -> IngestionResult:
        symbol_list = [symbols] if isinstance(symbols, str) else list(symbols)
        timeframe = TimeFrame.parse(timeframe)
        started = perf_counter()
        with log_context(symbol=",".join(symbol_list)):
            bars = await self.client.get_historical_bars(symbol_list, timeframe, start, end)
            written = await self.repository.upsert_bars(bars)
            result = IngestionResult(
                symbols=symbol_list,
                timeframe=str(timeframe),
                fetched=len(bars),
                written=written,
                duration_ms=(perf_counter() - started) * 1000,
            )
            logger.info(
                f"ingested bars: fetched={result.fetched} written={result.written} "
                f"skipped={result.duplicates_skipped}"
            )
        return result


__all__ = ["BarIngestionService", "IngestionResult"]
