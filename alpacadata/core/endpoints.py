"""Endpoint URL construction for the Alpaca stock market data API.

Every builder method is pure: it renders an absolute URL from its arguments
and the configuration captured at construction time.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from urllib.parse import quote

from alpacadata.core.config.settings import DEFAULT_DATA_URL, AlpacaConfig
from alpacadata.core.exceptions.base import DataValidationError
from alpacadata.core.models.market import TimeFrame
from alpacadata.core.models.page import normalize_cursor

URL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# kept literal so rendered URLs match the provider documentation
_SAFE_QUERY_CHARS = ",:"


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_instant(value: datetime) -> str:
    """Render ``value`` as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC."""

    return as_utc(value).strftime(URL_DATETIME_FORMAT)


def _normalize_symbols(symbols: str | Sequence[str]) -> list[str]:
    if isinstance(symbols, str):
        symbols = [symbols]
    cleaned = [symbol.strip() for symbol in symbols if symbol and symbol.strip()]
    if not cleaned:
        raise DataValidationError("At least one symbol is required", validation_errors={"symbols": list(symbols)})
    return cleaned


def _check_range(start: datetime, end: datetime) -> None:
    if as_utc(start) > as_utc(end):
        raise DataValidationError(
            "start must not be after end",
            validation_errors={"start": format_instant(start), "end": format_instant(end)},
        )


class EndpointBuilder:
    """Render fully-qualified data API URLs."""

    def __init__(self, config: AlpacaConfig | None = None, *, data_url: str | None = None, page_limit: int | None = None):
        if config is not None:
            data_url = data_url or config.endpoints.data_url
            page_limit = page_limit or config.pagination.page_limit
        self.data_url = (data_url or DEFAULT_DATA_URL).rstrip("/")
        self.page_limit = page_limit or 10000

    def _query(self, params: list[tuple[str, str]]) -> str:
        return "&".join(f"{name}={quote(value, safe=_SAFE_QUERY_CHARS)}" for name, value in params)

    def _latest(self, kind: str, symbols: str | Sequence[str]) -> str:
        # the provider routes one symbol by path and several by query parameter
        cleaned = _normalize_symbols(symbols)
        if len(cleaned) == 1:
            return f"{self.data_url}/{quote(cleaned[0], safe='')}/{kind}/latest"
        return f"{self.data_url}/{kind}/latest?{self._query([('symbols', ','.join(cleaned))])}"

    def latest_bars(self, symbols: str | Sequence[str]) -> str:
        return self._latest("bars", symbols)

    def latest_quotes(self, symbols: str | Sequence[str]) -> str:
        return self._latest("quotes", symbols)

    def latest_trades(self, symbols: str | Sequence[str]) -> str:
        return self._latest("trades", symbols)

    def snapshots(self, symbols: str | Sequence[str]) -> str:
        cleaned = _normalize_symbols(symbols)
        if len(cleaned) == 1:
            return f"{self.data_url}/{quote(cleaned[0], safe='')}/snapshot"
        return f"{self.data_url}/snapshots?{self._query([('symbols', ','.join(cleaned))])}"

    def _paged(self, params: list[tuple[str, str]], page_token: str | None) -> list[tuple[str, str]]:
        params.append(("limit", str(self.page_limit)))
        cursor = normalize_cursor(page_token)
        if cursor is not None:
            params.append(("page_token", cursor))
        return params

    def historical_bars(
        self,
        symbols: str | Sequence[str],
        timeframe: str | TimeFrame,
        start: datetime,
        end: datetime,
        page_token: str | None = None,
    ) -> str:
        """URL for one page of historical bars across ``symbols``.

        ``timeframe`` is rendered as given; callers validate it with
        :meth:`TimeFrame.parse`.
        """

        cleaned = _normalize_symbols(symbols)
        _check_range(start, end)
        params = [
            ("symbols", ",".join(cleaned)),
            ("timeframe", str(timeframe).strip()),
            ("start", format_instant(start)),
            ("end", format_instant(end)),
        ]
        return f"{self.data_url}/bars?{self._query(self._paged(params, page_token))}"

    def historical_quotes(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
        page_token: str | None = None,
    ) -> str:
        """URL for one page of historical quotes for a single symbol."""

        cleaned = _normalize_symbols(symbol)
        if len(cleaned) != 1:
            raise DataValidationError("Historical quotes take exactly one symbol", validation_errors={"symbol": symbol})
        _check_range(start, end)
        params = [
            ("start", format_instant(start)),
            ("end", format_instant(end)),
        ]
        return f"{self.data_url}/{quote(cleaned[0], safe='')}/quotes?{self._query(self._paged(params, page_token))}"


__all__ = ["EndpointBuilder", "URL_DATETIME_FORMAT", "as_utc", "format_instant"]
