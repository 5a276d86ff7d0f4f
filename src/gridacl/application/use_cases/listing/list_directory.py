"""List directory use case - streams a collection's entries page by page."""

from collections.abc import AsyncIterator
from contextlib import aclosing

from gridacl.application.ports import GridSessionFactory
from gridacl.application.services.lazy_listing import list_paths
from gridacl.domain.entities import ListingRow
from gridacl.domain.exceptions import NotFound
from gridacl.domain.paths import ensure_valid_path, rm_last_slash
from gridacl.domain.value_objects import RequestContext


class ListDirectoryUseCase:
    """List subcollections, then data objects, directly under a collection."""

    def __init__(self, session_factory: GridSessionFactory, page_size: int = 500) -> None:
        self._sessions = session_factory
        self._page_size = page_size

    async def execute(self, context: RequestContext, path: str) -> AsyncIterator[ListingRow]:
        """Yield rows lazily. Closing the iterator early releases the session."""
        path = rm_last_slash(path)
        ensure_valid_path(path)
        async with self._sessions.session(context) as session:
            if not await session.grid.is_collection(path):
                raise NotFound("Collection", path)
            async with aclosing(list_paths(session.grid, path, self._page_size)) as rows:
                async for row in rows:
                    yield row
