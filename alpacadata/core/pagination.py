"""Cursor-driven pagination over page-returning fetch callables."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Generic, TypeVar

from alpacadata.core.exceptions.base import PaginationLimitError
from alpacadata.core.logging import get_logger
from alpacadata.core.models.page import PageResult

logger = get_logger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[str | None], Awaitable[PageResult[T]]]

DEFAULT_MAX_PAGES = 10000


class Paginator(Generic[T]):
    """Walk a cursor-paginated endpoint until the provider stops returning a cursor.

    ``fetch_page`` receives the current cursor (``None`` for the first page)
    and returns one :class:`PageResult`. Pages are requested strictly one after
    another since each URL depends on the previous page's cursor.
    """

    def __init__(self, fetch_page: PageFetcher[T], max_pages: int = DEFAULT_MAX_PAGES) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be positive")
        self.fetch_page = fetch_page
        self.max_pages = max_pages
        self.pages_fetched = 0

    async def iter_pages(self) -> AsyncIterator[PageResult[T]]:
        """Yield pages in provider order.

        Breaking out of the loop stops the walk; no request is in flight
        between yields.
        """
        cursor: str | None = None
        self.pages_fetched = 0
        while True:
            if self.pages_fetched >= self.max_pages:
                raise PaginationLimitError(
                    f"Stopped after {self.max_pages} pages with a page token still present",
                    max_pages=self.max_pages,
                    details={"next_cursor": cursor},
                )
            page = await self.fetch_page(cursor)
            self.pages_fetched += 1
            logger.debug(f"page {self.pages_fetched}: {len(page.records)} records, has_next={page.has_next}")
            yield page
            if not page.has_next:
                return
            cursor = page.next_cursor

    async def collect(self, into: list[T] | None = None) -> list[T]:
        """Return every record of every page, in order.

        When ``into`` is given records are appended to it as pages arrive, so a
        caller keeps the earlier pages if a later fetch raises.
        """
        records: list[T] = into if into is not None else []
        try:
            async for page in self.iter_pages():
                records.extend(page.records)
        except PaginationLimitError as exc:
            exc.records = list(records)
            raise
        return records


async def collect_pages(
    fetch_page: PageFetcher[T],
    max_pages: int = DEFAULT_MAX_PAGES,
    into: list[T] | None = None,
) -> list[T]:
    """Shortcut for ``Paginator(fetch_page, max_pages).collect(into)``."""

    return await Paginator(fetch_page, max_pages).collect(into)


__all__ = ["DEFAULT_MAX_PAGES", "PageFetcher", "Paginator", "collect_pages"]
