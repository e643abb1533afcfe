"""Tests for the bar ingestion service."""

from __future__ import annotations

from datetime import UTC, datetime

import httpx
import pytest

from alpacadata.core.client import MarketDataClient
from alpacadata.core.config.settings import AlpacaConfig
from alpacadata.core.data.repositories.bars import BarRepository
from alpacadata.core.data.storage.duckdb_factory import DuckDBFactory
from alpacadata.core.models.base import Bar
from alpacadata.core.services import BarIngestionService

START = datetime(2024, 1, 1, tzinfo=UTC)
END = datetime(2024, 1, 31, tzinfo=UTC)


class StubClient:
    def __init__(self, bars: list[Bar]) -> None:
        self.bars = bars
        self.calls: list[tuple[object, ...]] = []

    async def get_historical_bars(self, symbols, timeframe, start, end) -> list[Bar]:
        self.calls.append((symbols, timeframe, start, end))
        return self.bars


@pytest.fixture
def repository():
    repo = BarRepository(DuckDBFactory().create_connection())
    yield repo
    repo.close()


@pytest.mark.asyncio
async def test_ingest_writes_and_skips_duplicates(repository: BarRepository, make_bar) -> None:
    client = StubClient([make_bar(day=2), make_bar(day=3)])
    service = BarIngestionService(client, repository)  # type: ignore[arg-type]

    first = await service.ingest("AAPL", "1D", START, END)
    second = await service.ingest(["AAPL"], "1D", START, END)

    assert (first.fetched, first.written, first.duplicates_skipped) == (2, 2, 0)
    assert (second.fetched, second.written, second.duplicates_skipped) == (2, 0, 2)
    assert first.symbols == ["AAPL"]
    assert first.timeframe == "1D"
    assert client.calls[0][0] == ["AAPL"]
    assert await repository.count_bars() == 2


@pytest.mark.asyncio
async def test_ingest_end_to_end_with_mock_provider(config: AlpacaConfig, repository: BarRepository) -> None:
    def bar(day: int) -> dict[str, object]:
        return {"t": f"2024-01-{day:02d}T05:00:00Z", "o": 1.5, "h": 2, "l": 1, "c": 1.75, "v": 100, "n": 3, "vw": 1.6}

    pages = {
        None: {"bars": {"AAPL": [bar(2)], "MSFT": [bar(2)]}, "next_page_token": "p2"},
        "p2": {"bars": {"AAPL": [bar(3)]}, "next_page_token": None},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=pages[request.url.params.get("page_token")])

    async with MarketDataClient(config, transport=httpx.MockTransport(handler)) as client:
        result = await BarIngestionService(client, repository).ingest(["AAPL", "MSFT"], "1D", START, END)

    assert result.fetched == 3
    assert result.written == 3
    stored = await repository.get_bars_by_symbol("AAPL", START, END)
    assert [b.timestamp.day for b in stored] == [2, 3]
