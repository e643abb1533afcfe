"""Response parsing for the stock market data endpoints.

Each query kind has its own response variant. Wire records (``RawBar``,
``RawQuoteObservation``) mirror the provider's abbreviated JSON keys and are
joined with their symbol here to produce the domain records. A missing root
field yields an empty result; anything that is present but cannot be read
raises :class:`ResponseParseError`.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from alpacadata.core.exceptions.base import ResponseParseError
from alpacadata.core.models.base import Bar, Quote, QuotePair
from alpacadata.core.models.market import QuoteSide
from alpacadata.core.models.page import PageResult

_WIRE_CONFIG = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

# the provider sends nanosecond fractions; datetime holds microseconds
_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


def _trim_fraction(value: Any) -> Any:
    if isinstance(value, str):
        return _FRACTION_PATTERN.sub(r"\1", value, count=1)
    return value


class RawBar(BaseModel):
    """Bar as sent by the provider; carries no symbol."""

    model_config = _WIRE_CONFIG

    t: datetime
    o: Decimal
    h: Decimal
    l: Decimal  # noqa: E741
    c: Decimal
    v: int
    n: int = 0
    vw: Decimal = Decimal("0")

    @field_validator("t", mode="before")
    @classmethod
    def trim_timestamp_fraction(cls, value: Any) -> Any:
        return _trim_fraction(value)

    def to_bar(self, symbol: str) -> Bar:
        return Bar(
            symbol=symbol,
            timestamp=self.t,
            open=self.o,
            high=self.h,
            low=self.l,
            close=self.c,
            volume=self.v,
            trade_count=self.n,
            vwap=self.vw,
        )


def _present(exchange: str | None) -> bool:
    return exchange is not None and exchange.strip() != ""


class RawQuoteObservation(BaseModel):
    """One best bid/ask observation as sent by the provider."""

    model_config = _WIRE_CONFIG

    t: datetime | None = None
    ax: str | None = None
    ap: Decimal | None = None
    as_: float | None = Field(default=None, alias="as")
    bx: str | None = None
    bp: Decimal | None = None
    bs: float | None = None

    @field_validator("t", mode="before")
    @classmethod
    def trim_timestamp_fraction(cls, value: Any) -> Any:
        return _trim_fraction(value)

    def to_quote_pair(self, symbol: str) -> QuotePair:
        # the exchange code alone decides whether a side was quoted
        ask = None
        if _present(self.ax):
            ask = Quote(
                timestamp=self.t,
                side=QuoteSide.ASK,
                exchange=self.ax.strip(),
                price=self.ap if self.ap is not None else Decimal("0"),
                size=self.as_ if self.as_ is not None else 0.0,
            )
        bid = None
        if _present(self.bx):
            bid = Quote(
                timestamp=self.t,
                side=QuoteSide.BID,
                exchange=self.bx.strip(),
                price=self.bp if self.bp is not None else Decimal("0"),
                size=self.bs if self.bs is not None else 0.0,
            )
        return QuotePair(symbol=symbol, timestamp=self.t, ask=ask, bid=bid)


class LatestBarsResponse(BaseModel):
    """``{"bars": {SYM: bar}}`` or, for the single-symbol route, ``{"symbol": SYM, "bar": bar}``."""

    model_config = ConfigDict(extra="ignore")

    bars: dict[str, RawBar] | None = None
    symbol: str | None = None
    bar: RawBar | None = None

    def to_records(self) -> list[Bar]:
        if self.bars is not None:
            return [raw.to_bar(symbol) for symbol, raw in self.bars.items()]
        if self.symbol and self.bar is not None:
            return [self.bar.to_bar(self.symbol)]
        return []


class HistoricalBarsResponse(BaseModel):
    """``{"bars": {SYM: [bar, ...]}, "next_page_token": ...}``."""

    model_config = ConfigDict(extra="ignore")

    bars: dict[str, list[RawBar] | None] | None = None
    next_page_token: str | None = None

    def to_page(self) -> PageResult[Bar]:
        if self.bars is None:
            return PageResult(records=[], next_cursor=None)
        records = [raw.to_bar(symbol) for symbol, raws in self.bars.items() for raw in raws or []]
        return PageResult(records=records, next_cursor=self.next_page_token)


class LatestQuotesResponse(BaseModel):
    """``{"quotes": {SYM: obs}}`` or ``{"symbol": SYM, "quote": obs}``."""

    model_config = ConfigDict(extra="ignore")

    quotes: dict[str, RawQuoteObservation] | None = None
    symbol: str | None = None
    quote: RawQuoteObservation | None = None

    def to_records(self) -> list[QuotePair]:
        if self.quotes is not None:
            return [raw.to_quote_pair(symbol) for symbol, raw in self.quotes.items()]
        if self.symbol and self.quote is not None:
            return [self.quote.to_quote_pair(self.symbol)]
        return []


class HistoricalQuotesResponse(BaseModel):
    """``{"symbol": SYM, "quotes": [obs, ...], "next_page_token": ...}``."""

    model_config = ConfigDict(extra="ignore")

    symbol: str | None = None
    quotes: list[RawQuoteObservation] | None = None
    next_page_token: str | None = None

    def to_page(self) -> PageResult[QuotePair]:
        if self.quotes is None or not self.symbol:
            return PageResult(records=[], next_cursor=None)
        records = [raw.to_quote_pair(self.symbol) for raw in self.quotes]
        return PageResult(records=records, next_cursor=self.next_page_token)


ResponseT = TypeVar("ResponseT", bound=BaseModel)


def _load(content: str | bytes, model: type[ResponseT]) -> ResponseT:
    kind = model.__name__
    try:
        # Decimal keeps prices exact
        payload: Any = json.loads(content, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseParseError(
            f"Response is not valid JSON: {exc}",
            response_kind=kind,
            details={"body": _excerpt(content)},
        ) from exc

    if not isinstance(payload, dict):
        raise ResponseParseError(
            f"Expected a JSON object, got {type(payload).__name__}",
            response_kind=kind,
            details={"body": _excerpt(content)},
        )

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
            for error in exc.errors()
        ]
        raise ResponseParseError(
            f"Response does not match the {kind} shape",
            response_kind=kind,
            details={"errors": errors},
        ) from exc


def _excerpt(content: str | bytes, limit: int = 200) -> str:
    text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
    return text[:limit]


def parse_latest_bars(content: str | bytes) -> list[Bar]:
    """Parse a latest-bars response into one Bar per symbol."""

    return _load(content, LatestBarsResponse).to_records()


def parse_historical_bars(content: str | bytes) -> PageResult[Bar]:
    """Parse one page of historical bars."""

    return _load(content, HistoricalBarsResponse).to_page()


def parse_latest_quotes(content: str | bytes) -> list[QuotePair]:
    """Parse a latest-quotes response into one QuotePair per symbol."""

    return _load(content, LatestQuotesResponse).to_records()


def parse_historical_quotes(content: str | bytes) -> PageResult[QuotePair]:
    """Parse one page of historical quotes."""

    return _load(content, HistoricalQuotesResponse).to_page()


__all__ = [
    "HistoricalBarsResponse",
    "HistoricalQuotesResponse",
    "LatestBarsResponse",
    "LatestQuotesResponse",
    "RawBar",
    "RawQuoteObservation",
    "parse_historical_bars",
    "parse_historical_quotes",
    "parse_latest_bars",
    "parse_latest_quotes",
]
