"""Tests for cursor-driven pagination."""

from __future__ import annotations

import pytest

from alpacadata.core.exceptions import NetworkError, PaginationLimitError
from alpacadata.core.models.page import PageResult
from alpacadata.core.pagination import Paginator, collect_pages


class ScriptedPages:
    """Fetcher returning canned pages and recording every cursor it receives."""

    def __init__(self, pages: list[PageResult[int] | Exception]) -> None:
        self.pages = pages
        self.cursors: list[str | None] = []

    async def __call__(self, cursor: str | None) -> PageResult[int]:
        self.cursors.append(cursor)
        page = self.pages[len(self.cursors) - 1]
        if isinstance(page, Exception):
            raise page
        return page


def _three_pages() -> ScriptedPages:
    return ScriptedPages(
        [
            PageResult([1, 2], "c1"),
            PageResult([3], "c2"),
            PageResult([4, 5], None),
        ]
    )


@pytest.mark.asyncio
async def test_collect_fetches_each_page_once_in_order() -> None:
    fetcher = _three_pages()
    paginator = Paginator(fetcher)

    records = await paginator.collect()

    assert records == [1, 2, 3, 4, 5]
    assert fetcher.cursors == [None, "c1", "c2"]
    assert paginator.pages_fetched == 3


@pytest.mark.asyncio
async def test_single_page_without_cursor() -> None:
    fetcher = ScriptedPages([PageResult([7], "  ")])

    assert await collect_pages(fetcher) == [7]
    assert fetcher.cursors == [None]


@pytest.mark.asyncio
async def test_empty_first_page() -> None:
    fetcher = ScriptedPages([PageResult([], None)])
    assert await collect_pages(fetcher) == []


@pytest.mark.asyncio
async def test_error_on_later_page_propagates_and_keeps_partial_records() -> None:
    failure = NetworkError("HTTP request failed: 500", status_code=500)
    fetcher = ScriptedPages([PageResult([1, 2], "c1"), failure])
    partial: list[int] = []

    with pytest.raises(NetworkError) as excinfo:
        await Paginator(fetcher).collect(into=partial)

    assert excinfo.value is failure
    assert partial == [1, 2]


@pytest.mark.asyncio
async def test_max_pages_bound_raises_with_collected_records() -> None:
    fetcher = ScriptedPages([PageResult([1], "c1"), PageResult([2], "c2"), PageResult([3], "c3")])

    with pytest.raises(PaginationLimitError) as excinfo:
        await Paginator(fetcher, max_pages=2).collect()

    assert excinfo.value.records == [1, 2]
    assert excinfo.value.details["max_pages"] == 2
    assert excinfo.value.details["next_cursor"] == "c2"
    assert fetcher.cursors == [None, "c1"]


@pytest.mark.asyncio
async def test_max_pages_not_hit_when_last_page_has_no_cursor() -> None:
    fetcher = _three_pages()
    assert await Paginator(fetcher, max_pages=3).collect() == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_breaking_out_of_iter_pages_stops_fetching() -> None:
    fetcher = _three_pages()
    paginator = Paginator(fetcher)

    async for page in paginator.iter_pages():
        assert page.records == [1, 2]
        break

    assert fetcher.cursors == [None]


def test_max_pages_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Paginator(_three_pages(), max_pages=0)
