"""Bar command implementations for the alpacadata CLI."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime

import typer

from alpacadata.core.client.client import MarketDataClient
from alpacadata.core.config.settings import AlpacaConfig
from alpacadata.core.data.repositories.bars import BarRepository
from alpacadata.core.data.storage.duckdb_factory import DuckDBFactory, DuckDBFactoryConfig
from alpacadata.core.models.base import Bar
from alpacadata.core.services.ingestion import BarIngestionService, IngestionResult

from .utils import (
    BAR_COLUMNS,
    bar_to_row,
    handle_errors,
    load_config,
    parse_instant,
    parse_symbols,
    prepare_output,
)

bars_app = typer.Typer(help="Bar (OHLCV) operations.")

INGEST_COLUMNS = ["symbols", "timeframe", "fetched", "written", "skipped", "duration_ms"]


def register(app: typer.Typer) -> None:
    """Register the bars command group on the provided application."""

    app.add_typer(bars_app, name="bars", help="Latest, historical and stored bars")


def get_client(config: AlpacaConfig) -> MarketDataClient:
    """Factory hook for obtaining a :class:`MarketDataClient`."""

    return MarketDataClient(config)


def get_repository(database: str) -> BarRepository:
    """Factory hook for obtaining a :class:`BarRepository` on ``database``."""

    factory = DuckDBFactory(DuckDBFactoryConfig(database=database))
    return BarRepository(factory.create_connection())


@bars_app.command("latest")
def latest_command(
    ctx: typer.Context,
    symbols: str = typer.Option(..., "--symbols", help="Comma separated list of symbols."),
) -> None:
    """Show the latest bar for each symbol."""

    formatter, stream, stack, _ = prepare_output(ctx)
    with stack, handle_errors():
        symbol_list = parse_symbols(symbols)
        client = get_client(load_config())
        bars = asyncio.run(_latest_bars(client, symbol_list))
        formatter.render([bar_to_row(bar) for bar in bars], stream=stream, columns=BAR_COLUMNS)


@bars_app.command("history")
def history_command(
    ctx: typer.Context,
    symbols: str = typer.Option(..., "--symbols", help="Comma separated list of symbols."),
    timeframe: str = typer.Option("1D", "--timeframe", help="Bar granularity, e.g. 15T, 1H, 1D."),
    start: str = typer.Option(..., "--start", help="Range start (ISO 8601, UTC when naive)."),
    end: str = typer.Option(..., "--end", help="Range end (ISO 8601, UTC when naive)."),
) -> None:
    """Fetch every historical bar in the range, following pagination."""

    formatter, stream, stack, _ = prepare_output(ctx)
    with stack, handle_errors():
        symbol_list = parse_symbols(symbols)
        start_at = parse_instant(start, "start")
        end_at = parse_instant(end, "end")
        client = get_client(load_config())
        bars = asyncio.run(_historical_bars(client, symbol_list, timeframe, start_at, end_at))
        formatter.render([bar_to_row(bar) for bar in bars], stream=stream, columns=BAR_COLUMNS)


@bars_app.command("ingest")
def ingest_command(
    ctx: typer.Context,
    symbols: str = typer.Option(..., "--symbols", help="Comma separated list of symbols."),
    timeframe: str = typer.Option("1D", "--timeframe", help="Bar granularity, e.g. 15T, 1H, 1D."),
    start: str = typer.Option(..., "--start", help="Range start (ISO 8601, UTC when naive)."),
    end: str = typer.Option(..., "--end", help="Range end (ISO 8601, UTC when naive)."),
    database: str | None = typer.Option(None, "--database", help="DuckDB file, defaults to the configured one."),
) -> None:
    """Fetch historical bars and upsert them into DuckDB."""

    formatter, stream, stack, _ = prepare_output(ctx)
    with stack, handle_errors():
        symbol_list = parse_symbols(symbols)
        start_at = parse_instant(start, "start")
        end_at = parse_instant(end, "end")
        config = load_config()
        client = get_client(config)
        repository = get_repository(database or config.storage.database)
        try:
            result = asyncio.run(_ingest(client, repository, symbol_list, timeframe, start_at, end_at))
        finally:
            repository.close()
        formatter.render([_result_to_row(result)], stream=stream, columns=INGEST_COLUMNS)


@bars_app.command("stored")
def stored_command(
    ctx: typer.Context,
    symbol: str = typer.Option(..., "--symbol", help="Symbol to read back."),
    start: str = typer.Option(..., "--start", help="Range start, inclusive."),
    end: str = typer.Option(..., "--end", help="Range end, inclusive."),
    database: str | None = typer.Option(None, "--database", help="DuckDB file, defaults to the configured one."),
) -> None:
    """Show bars already stored in DuckDB, oldest first."""

    formatter, stream, stack, _ = prepare_output(ctx)
    with stack, handle_errors():
        start_at = parse_instant(start, "start")
        end_at = parse_instant(end, "end")
        repository = get_repository(database or load_config().storage.database)
        try:
            bars = asyncio.run(repository.get_bars_by_symbol(symbol.strip(), start_at, end_at))
        finally:
            repository.close()
        formatter.render([bar_to_row(bar) for bar in bars], stream=stream, columns=BAR_COLUMNS)


async def _latest_bars(client: MarketDataClient, symbols: Sequence[str]) -> list[Bar]:
    async with client:
        return await client.get_latest_bars(symbols)


async def _historical_bars(
    client: MarketDataClient,
    symbols: Sequence[str],
    timeframe: str,
    start: datetime,
    end: datetime,
) -> list[Bar]:
    async with client:
        return await client.get_historical_bars(symbols, timeframe, start, end)


async def _ingest(
    client: MarketDataClient,
    repository: BarRepository,
    symbols: Sequence[str],
    timeframe: str,
    start: datetime,
    end: datetime,
) -> IngestionResult:
    async with client:
        return await BarIngestionService(client, repository).ingest(symbols, timeframe, start, end)


def _result_to_row(result: IngestionResult) -> dict[str, object]:
    return {
        "symbols": ",".join(result.symbols),
        "timeframe": result.timeframe,
        "fetched": result.fetched,
        "written": result.written,
        "skipped": result.duplicates_skipped,
        "duration_ms": round(result.duration_ms, 1),
    }


__all__ = [
    "bars_app",
    "get_client",
    "get_repository",
    "history_command",
    "ingest_command",
    "latest_command",
    "register",
    "stored_command",
]
