"""Quote command implementations for the alpacadata CLI."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime

import typer

from alpacadata.core.client.client import MarketDataClient
from alpacadata.core.config.settings import AlpacaConfig
from alpacadata.core.models.base import QuotePair

from .utils import (
    QUOTE_COLUMNS,
    handle_errors,
    load_config,
    parse_instant,
    parse_symbols,
    prepare_output,
    quote_pair_to_row,
)

quotes_app = typer.Typer(help="Bid/ask quote operations.")


def register(app: typer.Typer) -> None:
    """Register the quotes command group on the provided application."""

    app.add_typer(quotes_app, name="quotes", help="Latest and historical bid/ask quotes")


def get_client(config: AlpacaConfig) -> MarketDataClient:
    """Factory hook for obtaining a :class:`MarketDataClient`."""

    return MarketDataClient(config)


@quotes_app.command("latest")
def latest_command(
    ctx: typer.Context,
    symbols: str = typer.Option(..., "--symbols", help="Comma separated list of symbols."),
) -> None:
    """Show the latest bid/ask pair for each symbol."""

    formatter, stream, stack, _ = prepare_output(ctx)
    with stack, handle_errors():
        symbol_list = parse_symbols(symbols)
        client = get_client(load_config())
        quotes = asyncio.run(_latest_quotes(client, symbol_list))
        formatter.render([quote_pair_to_row(q) for q in quotes], stream=stream, columns=QUOTE_COLUMNS)


@quotes_app.command("history")
def history_command(
    ctx: typer.Context,
    symbol: str = typer.Option(..., "--symbol", help="Symbol to fetch."),
    start: str = typer.Option(..., "--start", help="Range start (ISO 8601, UTC when naive)."),
    end: str = typer.Option(..., "--end", help="Range end (ISO 8601, UTC when naive)."),
) -> None:
    """Fetch every historical quote in the range, following pagination."""

    formatter, stream, stack, _ = prepare_output(ctx)
    with stack, handle_errors():
        start_at = parse_instant(start, "start")
        end_at = parse_instant(end, "end")
        client = get_client(load_config())
        quotes = asyncio.run(_historical_quotes(client, symbol.strip(), start_at, end_at))
        formatter.render([quote_pair_to_row(q) for q in quotes], stream=stream, columns=QUOTE_COLUMNS)


async def _latest_quotes(client: MarketDataClient, symbols: Sequence[str]) -> list[QuotePair]:
    async with client:
        return await client.get_latest_quotes(symbols)


async def _historical_quotes(
    client: MarketDataClient, symbol: str, start: datetime, end: datetime
) -> list[QuotePair]:
    async with client:
        return await client.get_historical_quotes(symbol, start, end)


__all__ = ["get_client", "history_command", "latest_command", "quotes_app", "register"]
