"""Lazy, offset-paged listings over the grid's query endpoint."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from gridacl.application.ports import StorageGrid
from gridacl.domain.entities import ListingQuery, ListingRow, Page, ResourceKind
from gridacl.domain.paths import ensure_valid_path, rm_last_slash

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500

FetchPage = Callable[[int], Awaitable[Page]]


async def stream_pages(fetch_page: FetchPage) -> AsyncIterator[ListingRow]:
    """Yield rows page by page, fetching the next page only when needed.

    The next offset is the ``count`` carried by the last row of a page. The
    stream ends on an empty page, on a page whose last row is marked as the
    last result, or when the endpoint hands back an offset that does not
    advance.
    """
    offset = 0
    done = False
    while not done:
        page = await fetch_page(offset)
        for row in page.rows:
            yield row
        if page.is_last:
            done = True
        elif page.next_offset <= offset:
            logger.warning(
                "listing offset did not advance (%d -> %d), stopping",
                offset,
                page.next_offset,
            )
            done = True
        else:
            offset = page.next_offset


def _listing(grid: StorageGrid, kind: ResourceKind, path: str, page_size: int) -> AsyncIterator[ListingRow]:
    path = rm_last_slash(path)
    ensure_valid_path(path)
    query = ListingQuery(kind=kind, path=path, page_size=page_size)
    return stream_pages(lambda offset: grid.query_page(query, offset))


def list_subdirs_in(
    grid: StorageGrid, path: str, page_size: int = DEFAULT_PAGE_SIZE
) -> AsyncIterator[ListingRow]:
    """Collections directly under ``path``."""
    return _listing(grid, ResourceKind.COLLECTION, path, page_size)


def list_files_in(
    grid: StorageGrid, path: str, page_size: int = DEFAULT_PAGE_SIZE
) -> AsyncIterator[ListingRow]:
    """Data objects directly under ``path``."""
    return _listing(grid, ResourceKind.DATA_OBJECT, path, page_size)


async def list_paths(
    grid: StorageGrid, path: str, page_size: int = DEFAULT_PAGE_SIZE
) -> AsyncIterator[ListingRow]:
    """Every entry directly under ``path``: collections first, then data objects."""
    async for row in list_subdirs_in(grid, path, page_size):
        yield row
    async for row in list_files_in(grid, path, page_size):
        yield row
