"""Market data client composing endpoints, transport, parsers and pagination."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from functools import partial

import httpx

from alpacadata.core.config.settings import AlpacaConfig, ConfigManager
from alpacadata.core.endpoints import EndpointBuilder
from alpacadata.core.http_adapter import HttpClient
from alpacadata.core.logging import get_logger, log_context
from alpacadata.core.models.base import Bar, QuotePair
from alpacadata.core.models.market import TimeFrame
from alpacadata.core.models.page import PageResult
from alpacadata.core.pagination import Paginator
from alpacadata.core.responses import (
    parse_historical_bars,
    parse_historical_quotes,
    parse_latest_bars,
    parse_latest_quotes,
)

logger = get_logger(__name__)


class MarketDataClient:
    """Fetch latest and historical bars and quotes.

    Historical requests are walked page by page until the provider stops
    returning a page token. Separate calls share nothing but the pooled HTTP
    connection, so they may be awaited concurrently.

    Example:
        >>> async with MarketDataClient.from_env() as client:
        ...     bars = await client.get_historical_bars("AAPL", "1D", start, end)
    """

    def __init__(
        self,
        config: AlpacaConfig,
        http_client: HttpClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.endpoints = EndpointBuilder(config)
        self.http = http_client or HttpClient.from_config(config, transport=transport)

    @classmethod
    def from_env(cls, transport: httpx.AsyncBaseTransport | None = None) -> MarketDataClient:
        """Build a client from ``~/.alpacadata/config.toml`` and the environment."""

        return cls(ConfigManager().get_config(), transport=transport)

    async def __aenter__(self) -> MarketDataClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http.close()

    # latest

    async def get_latest_bars(self, symbols: str | Sequence[str]) -> list[Bar]:
        """Latest bar for each symbol."""

        url = self.endpoints.latest_bars(symbols)
        content = await self.http.get_text(url)
        bars = parse_latest_bars(content)
        logger.info(f"latest bars: {len(bars)} records")
        return bars

    async def get_latest_quotes(self, symbols: str | Sequence[str]) -> list[QuotePair]:
        """Latest bid/ask pair for each symbol."""

        url = self.endpoints.latest_quotes(symbols)
        content = await self.http.get_text(url)
        quotes = parse_latest_quotes(content)
        logger.info(f"latest quotes: {len(quotes)} records")
        return quotes

    # historical, one page

    async def fetch_historical_bars_page(
        self,
        symbols: str | Sequence[str],
        timeframe: str | TimeFrame,
        start: datetime,
        end: datetime,
        cursor: str | None = None,
    ) -> PageResult[Bar]:
        url = self.endpoints.historical_bars(symbols, TimeFrame.parse(timeframe), start, end, cursor)
        return parse_historical_bars(await self.http.get_text(url))

    async def fetch_historical_quotes_page(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
        cursor: str | None = None,
    ) -> PageResult[QuotePair]:
        url = self.endpoints.historical_quotes(symbol, start, end, cursor)
        return parse_historical_quotes(await self.http.get_text(url))

    # historical, all pages

    def historical_bars_paginator(
        self,
        symbols: str | Sequence[str],
        timeframe: str | TimeFrame,
        start: datetime,
        end: datetime,
    ) -> Paginator[Bar]:
        """Paginator over historical bars; iterate it to stop between pages."""

        timeframe = TimeFrame.parse(timeframe)
        fetch = partial(self.fetch_historical_bars_page, symbols, timeframe, start, end)
        return Paginator(fetch, max_pages=self.config.pagination.max_pages)

    def historical_quotes_paginator(self, symbol: str, start: datetime, end: datetime) -> Paginator[QuotePair]:
        """Paginator over historical quotes for one symbol."""

        fetch = partial(self.fetch_historical_quotes_page, symbol, start, end)
        return Paginator(fetch, max_pages=self.config.pagination.max_pages)

    async def get_historical_bars(
        self,
        symbols: str | Sequence[str],
        timeframe: str | TimeFrame,
        start: datetime,
        end: datetime,
        into: list[Bar] | None = None,
    ) -> list[Bar]:
        """Every bar for ``symbols`` between ``start`` and ``end``.

        Args:
            symbols: one ticker or several
            timeframe: granularity such as ``"15T"``, ``"1H"`` or ``"1D"``
            start: first instant of the range
            end: last instant of the range
            into: optional list receiving records page by page

        Returns:
            Bars in provider order across all pages.
        """
        paginator = self.historical_bars_paginator(symbols, timeframe, start, end)
        label = symbols if isinstance(symbols, str) else ",".join(symbols)
        with log_context(symbol=label):
            bars = await paginator.collect(into)
            logger.info(f"historical bars: {len(bars)} records over {paginator.pages_fetched} pages")
        return bars

    async def get_historical_quotes(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
        into: list[QuotePair] | None = None,
    ) -> list[QuotePair]:
        """Every quote pair for ``symbol`` between ``start`` and ``end``."""

        paginator = self.historical_quotes_paginator(symbol, start, end)
        with log_context(symbol=symbol):
            quotes = await paginator.collect(into)
            logger.info(f"historical quotes: {len(quotes)} records over {paginator.pages_fetched} pages")
        return quotes


__all__ = ["MarketDataClient"]
