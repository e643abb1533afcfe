"""Market-related enums and value types."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from alpacadata.core.exceptions.base import DataValidationError


class QuoteSide(str, Enum):
    """Side of a quote."""

    ASK = "ask"
    BID = "bid"


class TimeFrameUnit(str, Enum):
    """Bar aggregation unit, valued by its short provider code."""

    MINUTE = "T"
    HOUR = "H"
    DAY = "D"
    WEEK = "W"
    MONTH = "M"


_UNIT_ALIASES: dict[str, TimeFrameUnit] = {
    "t": TimeFrameUnit.MINUTE,
    "min": TimeFrameUnit.MINUTE,
    "h": TimeFrameUnit.HOUR,
    "hour": TimeFrameUnit.HOUR,
    "d": TimeFrameUnit.DAY,
    "day": TimeFrameUnit.DAY,
    "w": TimeFrameUnit.WEEK,
    "week": TimeFrameUnit.WEEK,
    "m": TimeFrameUnit.MONTH,
    "month": TimeFrameUnit.MONTH,
}

_ALLOWED_AMOUNTS: dict[TimeFrameUnit, frozenset[int]] = {
    TimeFrameUnit.MINUTE: frozenset(range(1, 60)),
    TimeFrameUnit.HOUR: frozenset(range(1, 24)),
    TimeFrameUnit.DAY: frozenset({1}),
    TimeFrameUnit.WEEK: frozenset({1}),
    TimeFrameUnit.MONTH: frozenset({1, 2, 3, 4, 6, 12}),
}

# "M" alone means month; minutes use "T" or "Min"
_TOKEN_PATTERN = re.compile(r"^\s*(\d+)\s*(T|Min|H|Hour|D|Day|W|Week|M|Month)\s*$")


@dataclass(frozen=True)
class TimeFrame:
    """Granularity of historical bars, e.g. ``15T`` or ``1D``."""

    amount: int
    unit: TimeFrameUnit

    def __post_init__(self) -> None:
        allowed = _ALLOWED_AMOUNTS[self.unit]
        if self.amount not in allowed:
            raise DataValidationError(
                f"Invalid amount {self.amount} for timeframe unit {self.unit.name.lower()}",
                validation_errors={"timeframe": f"{self.amount}{self.unit.value}"},
            )

    @classmethod
    def parse(cls, token: str | TimeFrame) -> TimeFrame:
        """Parse ``[1-59]T``, ``[1-23]H``, ``1D``, ``1W`` or ``{1,2,3,4,6,12}M``.

        The long provider spellings (``Min``, ``Hour``, ``Day``, ``Week``,
        ``Month``) are accepted as well.
        """
        if isinstance(token, TimeFrame):
            return token
        match = _TOKEN_PATTERN.match(token or "")
        if match is None:
            raise DataValidationError(
                f"Unrecognised timeframe '{token}'",
                validation_errors={"timeframe": token},
            )
        amount, unit_code = match.groups()
        return cls(int(amount), _UNIT_ALIASES[unit_code.lower()])

    @classmethod
    def minutes(cls, amount: int) -> TimeFrame:
        return cls(amount, TimeFrameUnit.MINUTE)

    @classmethod
    def hours(cls, amount: int) -> TimeFrame:
        return cls(amount, TimeFrameUnit.HOUR)

    @classmethod
    def day(cls) -> TimeFrame:
        return cls(1, TimeFrameUnit.DAY)

    @classmethod
    def week(cls) -> TimeFrame:
        return cls(1, TimeFrameUnit.WEEK)

    @classmethod
    def months(cls, amount: int) -> TimeFrame:
        return cls(amount, TimeFrameUnit.MONTH)

    def __str__(self) -> str:
        return f"{self.amount}{self.unit.value}"


__all__ = ["QuoteSide", "TimeFrame", "TimeFrameUnit"]
