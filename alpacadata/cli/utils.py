"""Utility helpers shared across CLI commands."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator, Mapping, Sequence
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

import typer

from alpacadata.core.config.settings import AlpacaConfig, ConfigManager
from alpacadata.core.exceptions.base import (
    AlpacaDataError,
    ConfigurationError,
    DataValidationError,
    ProviderError,
)
from alpacadata.core.models.base import Bar, QuotePair

from .constants import PROVIDER_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import OutputFormatter, create_formatter

BAR_COLUMNS = [
    "symbol",
    "timestamp",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "trade_count",
    "vwap",
]

QUOTE_COLUMNS = [
    "symbol",
    "timestamp",
    "ask_exchange",
    "ask_price",
    "ask_size",
    "bid_exchange",
    "bid_price",
    "bid_size",
    "spread",
]


@dataclass(slots=True)
class CLIOptions:
    """Resolved options derived from the Typer context."""

    format: str = "table"
    output_path: Path | None = None
    no_color: bool = False


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    """Extract :class:`CLIOptions` from the Typer context object."""

    ctx.ensure_object(dict)
    data = ctx.obj or {}
    return CLIOptions(
        format=str(data.get("format", "table")),
        output_path=data.get("output_path"),
        no_color=bool(data.get("no_color", False)),
    )


def prepare_output(ctx: typer.Context) -> tuple[OutputFormatter, TextIO, ExitStack, CLIOptions]:
    """Resolve formatter and writable stream for the current command."""

    options = get_cli_options(ctx)
    try:
        formatter = create_formatter(options.format, no_color=options.no_color)
    except ValueError as exc:  # pragma: no cover - validated at callback, safeguard for manual use
        emit_error(str(exc), "INVALID_FORMAT")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    stack = ExitStack()
    stream: TextIO
    if options.output_path is not None:
        try:
            stream = stack.enter_context(open(options.output_path, "w", encoding="utf-8"))
        except OSError as exc:
            stack.close()
            emit_error(f"Unable to open '{options.output_path}': {exc}", "OUTPUT_WRITE_ERROR")
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    else:
        stream = sys.stdout

    return formatter, stream, stack, options


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = _sanitize_details(details)
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def _sanitize_details(details: Mapping[str, object]) -> Mapping[str, object]:
    sanitized: dict[str, object] = {}
    for key, value in details.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            sanitized[key] = value
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            sanitized[key] = [str(item) for item in value]
        else:
            sanitized[key] = str(value)
    return sanitized


@contextmanager
def handle_errors() -> Iterator[None]:
    """Translate alpacadata errors into a JSON payload on stderr and an exit code."""

    try:
        yield
    except (ConfigurationError, DataValidationError) as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error
    except ProviderError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=PROVIDER_EXIT_CODE) from error
    except AlpacaDataError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=SYSTEM_EXIT_CODE) from error


def load_config() -> AlpacaConfig:
    """Configuration from ``~/.alpacadata/config.toml`` and the environment."""

    return ConfigManager().get_config()


def parse_symbols(value: str) -> list[str]:
    """Split a comma separated option, dropping blanks and repeats."""

    unique: list[str] = []
    for candidate in value.split(","):
        symbol = candidate.strip()
        if symbol and symbol not in unique:
            unique.append(symbol)
    if not unique:
        raise DataValidationError("No symbols supplied.", {"symbols": value})
    return unique


def parse_instant(value: str, option: str) -> datetime:
    """Parse an ISO date or datetime; naive values are taken as UTC."""

    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as exc:
        raise DataValidationError(
            f"Invalid {option} '{value}', expected an ISO 8601 date or datetime.",
            {option: value},
        ) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def bar_to_row(bar: Bar) -> dict[str, object]:
    return bar.model_dump(mode="json")


def quote_pair_to_row(pair: QuotePair) -> dict[str, object]:
    timestamp = pair.timestamp.isoformat() if pair.timestamp else None
    row: dict[str, object] = {"symbol": pair.symbol, "timestamp": timestamp}
    for name, quote in (("ask", pair.ask), ("bid", pair.bid)):
        row[f"{name}_exchange"] = quote.exchange if quote else None
        row[f"{name}_price"] = str(quote.price) if quote else None
        row[f"{name}_size"] = quote.size if quote else None
    spread = pair.spread
    row["spread"] = str(spread) if spread is not None else None
    return row


__all__ = [
    "BAR_COLUMNS",
    "CLIOptions",
    "QUOTE_COLUMNS",
    "bar_to_row",
    "emit_error",
    "get_cli_options",
    "handle_errors",
    "load_config",
    "parse_instant",
    "parse_symbols",
    "prepare_output",
    "quote_pair_to_row",
]
