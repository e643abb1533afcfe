"""Data models module."""

from alpacadata.core.models.base import Bar, Quote, QuotePair
from alpacadata.core.models.market import QuoteSide, TimeFrame, TimeFrameUnit
from alpacadata.core.models.page import PageResult, normalize_cursor

__all__ = [
    "Bar",
    "PageResult",
    "Quote",
    "QuotePair",
    "QuoteSide",
    "TimeFrame",
    "TimeFrameUnit",
    "normalize_cursor",
]
