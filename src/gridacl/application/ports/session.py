"""Grid session port - scoped ownership of one grid connection."""

from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from gridacl.application.ports.storage_grid import StorageGrid
from gridacl.domain.value_objects import RequestContext


class GridSessionHandle(Protocol):
    """An open session: the grid connection plus the request it serves."""

    @property
    def grid(self) -> StorageGrid: ...

    @property
    def context(self) -> RequestContext: ...

    async def release(self) -> None: ...

    async def run(
        self, fn: Callable[[StorageGrid], Awaitable[Any]], auto_close: bool = True
    ) -> Any: ...


class GridSessionFactory(Protocol):
    """Opens sessions for a request."""

    async def open(self, context: RequestContext) -> GridSessionHandle: ...

    def session(
        self, context: RequestContext
    ) -> AbstractAsyncContextManager[GridSessionHandle]: ...
