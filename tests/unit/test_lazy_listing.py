"""Unit tests for lazy, offset-paged listings."""

from contextlib import aclosing

import pytest

from gridacl.application.services.lazy_listing import (
    list_files_in,
    list_paths,
    list_subdirs_in,
    stream_pages,
)
from gridacl.domain.entities import ListingRow, Page, ResourceKind
from gridacl.domain.exceptions import InvalidPathLength

from tests.conftest import FakeStorageGrid


def _paged_source(total: int, page_size: int):
    """fetch_page over ``total`` numbered rows, recording requested offsets."""
    offsets: list[int] = []

    async def fetch_page(offset: int) -> Page:
        offsets.append(offset)
        end = min(offset + page_size, total)
        return Page(
            rows=[
                ListingRow(
                    path=f"/z/home/u/f{i}",
                    kind=ResourceKind.DATA_OBJECT,
                    count=end,
                    is_last_result=(i == end - 1 and end == total),
                )
                for i in range(offset, end)
            ]
        )

    return fetch_page, offsets


async def _collect(rows) -> list[ListingRow]:
    return [row async for row in rows]


@pytest.mark.asyncio
async def test_three_pages_of_fifty() -> None:
    """150 rows at 50 per page: offsets 0, 50, 100, no duplicates."""
    fetch_page, offsets = _paged_source(total=150, page_size=50)

    rows = await _collect(stream_pages(fetch_page))

    assert offsets == [0, 50, 100]
    assert len(rows) == 150
    assert len({r.path for r in rows}) == 150
    assert rows[-1].is_last_result


@pytest.mark.asyncio
async def test_stops_on_empty_page() -> None:
    """An empty page ends the stream even without a last-result marker."""
    offsets: list[int] = []

    async def fetch_page(offset: int) -> Page:
        offsets.append(offset)
        if offset == 0:
            return Page(rows=[ListingRow("/z/a", ResourceKind.COLLECTION, count=1)])
        return Page()

    rows = await _collect(stream_pages(fetch_page))

    assert [r.path for r in rows] == ["/z/a"]
    assert offsets == [0, 1]


@pytest.mark.asyncio
async def test_empty_listing_fetches_once() -> None:
    fetch_page, offsets = _paged_source(total=0, page_size=50)
    assert await _collect(stream_pages(fetch_page)) == []
    assert offsets == [0]


@pytest.mark.asyncio
async def test_next_offset_comes_from_last_row_count() -> None:
    """The endpoint's count hint is used even when it skips ahead."""
    offsets: list[int] = []

    async def fetch_page(offset: int) -> Page:
        offsets.append(offset)
        if offset == 0:
            return Page(rows=[ListingRow("/z/a", ResourceKind.COLLECTION, count=7)])
        return Page(rows=[ListingRow("/z/b", ResourceKind.COLLECTION, count=8, is_last_result=True)])

    rows = await _collect(stream_pages(fetch_page))

    assert offsets == [0, 7]
    assert [r.path for r in rows] == ["/z/a", "/z/b"]


@pytest.mark.asyncio
async def test_offset_that_does_not_advance_ends_stream() -> None:
    """An offset is never fetched twice."""
    offsets: list[int] = []

    async def fetch_page(offset: int) -> Page:
        offsets.append(offset)
        return Page(rows=[ListingRow("/z/a", ResourceKind.COLLECTION, count=offset)])

    await _collect(stream_pages(fetch_page))
    assert offsets == [0]


@pytest.mark.asyncio
async def test_abandoning_stream_fetches_no_more_pages() -> None:
    fetch_page, offsets = _paged_source(total=150, page_size=50)

    async with aclosing(stream_pages(fetch_page)) as rows:
        async for row in rows:
            if row.path == "/z/home/u/f10":
                break

    assert offsets == [0]


@pytest.mark.asyncio
async def test_listing_helpers_over_grid(grid: FakeStorageGrid) -> None:
    """Subdirectories, files and both, paging through the grid two at a time."""
    for name in ["c1", "c2", "c3"]:
        grid.add_collection(f"/z/home/u/{name}")
    for name in ["a.txt", "b.txt"]:
        grid.add_data_object(f"/z/home/u/{name}")

    subdirs = await _collect(list_subdirs_in(grid, "/z/home/u/", page_size=2))
    files = await _collect(list_files_in(grid, "/z/home/u", page_size=2))
    everything = await _collect(list_paths(grid, "/z/home/u", page_size=2))

    assert [r.path for r in subdirs] == ["/z/home/u/c1", "/z/home/u/c2", "/z/home/u/c3"]
    assert [r.path for r in files] == ["/z/home/u/a.txt", "/z/home/u/b.txt"]
    assert [r.path for r in everything] == [r.path for r in subdirs + files]
    collection_offsets = [
        offset for kind, path, offset in grid.page_requests if kind is ResourceKind.COLLECTION
    ]
    assert collection_offsets[:2] == [0, 2]


def test_listing_validates_path_before_any_call(grid: FakeStorageGrid) -> None:
    with pytest.raises(InvalidPathLength):
        list_subdirs_in(grid, "/z/" + "n" * 500)
    assert grid.page_requests == []
