"""Storage grid port - the narrow slice of the remote grid the engine needs."""

from typing import Protocol

from gridacl.domain.entities import (
    AccessEntry,
    GridInputStream,
    ListingQuery,
    Page,
    Resource,
)
from gridacl.domain.value_objects import PermissionLevel, RequestContext


class StorageGrid(Protocol):
    """Port for one open connection to the grid.

    Implementations raise RemoteOperationError for failed calls and NotFound
    for paths that do not exist.
    """

    @property
    def username(self) -> str: ...

    @property
    def zone(self) -> str: ...

    async def stat(self, path: str) -> Resource | None: ...

    async def is_collection(self, path: str) -> bool: ...

    async def is_data_object(self, path: str) -> bool: ...

    async def list_grants(self, path: str) -> list[AccessEntry]: ...

    async def set_grant(
        self, path: str, principal: str, level: PermissionLevel, recursive: bool = False
    ) -> None: ...

    async def revoke_grant(self, path: str, principal: str, recursive: bool = False) -> None: ...

    async def get_inheritance_flag(self, path: str) -> bool: ...

    async def set_inheritance_flag(self, path: str, enabled: bool) -> None: ...

    async def list_groups(self, principal: str) -> list[str]: ...

    async def query_page(self, query: ListingQuery, offset: int) -> Page: ...

    async def move(self, src: str, dst: str) -> None: ...

    async def open_input_stream(self, path: str) -> GridInputStream: ...

    async def close(self) -> None: ...


class GridConnector(Protocol):
    """Opens connections to the grid.

    Raises ConnectError; ``retryable`` is set for transient network failures.
    """

    async def connect(self, context: RequestContext) -> StorageGrid: ...
