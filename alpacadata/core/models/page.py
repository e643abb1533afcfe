"""Transient page result handed from the parsers to the paginator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


def normalize_cursor(cursor: str | None) -> str | None:
    """Return ``cursor`` stripped, or ``None`` when it is missing or blank."""

    if cursor is None:
        return None
    stripped = cursor.strip()
    return stripped or None


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """Records of one page plus the cursor pointing at the next one."""

    records: list[T] = field(default_factory=list)
    next_cursor: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "next_cursor", normalize_cursor(self.next_cursor))

    @property
    def has_next(self) -> bool:
        return self.next_cursor is not None


__all__ = ["PageResult", "normalize_cursor"]
