"""Domain records produced by the response parsers."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, field_serializer
from pydantic import ConfigDict as PydanticConfigDict

from .market import QuoteSide


class Bar(BaseModel):
    """Aggregated OHLCV statistics for one symbol over one time bucket.

    Identity is ``(symbol, timestamp)``.
    """

    symbol: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int
    trade_count: int
    vwap: Decimal

    model_config = PydanticConfigDict(frozen=True)

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.symbol, self.timestamp)

    @field_serializer("open", "high", "low", "close", "vwap", when_used="json")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)

    @field_serializer("timestamp", when_used="json")
    def serialize_datetime(self, value: datetime) -> str:
        """Serialize datetime to isoformat string."""
        return value.isoformat()


class Quote(BaseModel):
    """A single bid or ask observation.

    ``timestamp`` is ``None`` when the provider omitted it.
    """

    timestamp: datetime | None
    side: QuoteSide
    exchange: str
    price: Decimal
    size: float

    model_config = PydanticConfigDict(frozen=True)

    @field_serializer("price", when_used="json")
    def serialize_price(self, value: Decimal) -> str:
        return str(value)

    def __str__(self) -> str:
        return f"{self.side.value.upper()}: {self.size:g} shares for ${self.price} ea. via {self.exchange}"


class QuotePair(BaseModel):
    """Best bid and best ask for a symbol at one instant.

    Either side may be ``None`` when the provider had no quote for it. ``timestamp``
    is ``None`` when the observation carried no time.
    """

    symbol: str
    timestamp: datetime | None = None
    ask: Quote | None = None
    bid: Quote | None = None

    model_config = PydanticConfigDict(frozen=True)

    @property
    def spread(self) -> Decimal | None:
        """Ask minus bid, or ``None`` when a side is missing."""
        if self.ask is None or self.bid is None:
            return None
        return self.ask.price - self.bid.price

    def __str__(self) -> str:
        ask = str(self.ask) if self.ask else "None"
        bid = str(self.bid) if self.bid else "None"
        return f"Quotes for {self.symbol}: ask={ask} bid={bid}"
