"""Pytest fixtures for gridacl tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from gridacl.config import Settings
from gridacl.domain.entities import (
    AccessEntry,
    GridInputStream,
    ListingQuery,
    ListingRow,
    Page,
    Resource,
    ResourceKind,
)
from gridacl.domain.exceptions import NotFound, RemoteOperationError
from gridacl.domain.paths import dirname, rm_last_slash
from gridacl.domain.value_objects import PermissionLevel, RequestContext
from gridacl.infrastructure.grid.session import SessionFactory
from gridacl.infrastructure.permission.permission_checker import GridPermissionChecker


# --- Fake grid ---


class FakeStorageGrid:
    """In-memory storage grid implementing the StorageGrid port.

    Mutating calls are recorded in ``calls``; listing requests in
    ``page_requests``. ``fail_on`` maps an operation name to the exception
    it should raise.
    """

    def __init__(self, username: str = "rods", zone: str = "z") -> None:
        self._username = username
        self._zone = zone
        self.resources: dict[str, Resource] = {}
        self.grants: dict[str, dict[str, PermissionLevel]] = {}
        self.members: dict[str, set[str]] = {}
        self.contents: dict[str, bytes] = {}
        self.calls: list[tuple] = []
        self.page_requests: list[tuple[ResourceKind, str, int]] = []
        self.fail_on: dict[str, Exception] = {}
        self.close_count = 0

    # setup helpers

    def add_collection(
        self, path: str, inherits: bool = False, grants: dict[str, PermissionLevel] | None = None
    ) -> None:
        self.resources[path] = Resource(path, ResourceKind.COLLECTION, inherits)
        self.grants[path] = dict(grants or {})

    def add_data_object(
        self, path: str, content: bytes = b"", grants: dict[str, PermissionLevel] | None = None
    ) -> None:
        self.resources[path] = Resource(path, ResourceKind.DATA_OBJECT)
        self.grants[path] = dict(grants or {})
        self.contents[path] = content

    def add_group(self, group: str, members: list[str]) -> None:
        self.members[group] = set(members)

    def level(self, principal: str, path: str) -> PermissionLevel:
        return self.grants.get(path, {}).get(principal, PermissionLevel.NONE)

    def mutations(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise self.fail_on[op]

    def _require(self, path: str) -> Resource:
        resource = self.resources.get(rm_last_slash(path))
        if resource is None:
            raise NotFound("Path", path)
        return resource

    def _subtree(self, path: str) -> list[str]:
        return [p for p in self.resources if p == path or p.startswith(path + "/")]

    # StorageGrid port

    @property
    def username(self) -> str:
        return self._username

    @property
    def zone(self) -> str:
        return self._zone

    async def stat(self, path: str) -> Resource | None:
        self._maybe_fail("stat")
        return self.resources.get(rm_last_slash(path))

    async def is_collection(self, path: str) -> bool:
        resource = self.resources.get(rm_last_slash(path))
        return resource is not None and resource.kind is ResourceKind.COLLECTION

    async def is_data_object(self, path: str) -> bool:
        resource = self.resources.get(rm_last_slash(path))
        return resource is not None and resource.kind is ResourceKind.DATA_OBJECT

    async def list_grants(self, path: str) -> list[AccessEntry]:
        self._maybe_fail("list_grants")
        path = rm_last_slash(path)
        self._require(path)
        return [
            AccessEntry(principal=p, path=path, level=level)
            for p, level in self.grants[path].items()
        ]

    async def set_grant(
        self, path: str, principal: str, level: PermissionLevel, recursive: bool = False
    ) -> None:
        self._maybe_fail("set_grant")
        path = rm_last_slash(path)
        self._require(path)
        self.calls.append(("set_grant", path, principal, level, recursive))
        targets = self._subtree(path) if recursive else [path]
        for target in targets:
            if level == PermissionLevel.NONE:
                self.grants[target].pop(principal, None)
            else:
                self.grants[target][principal] = level

    async def revoke_grant(self, path: str, principal: str, recursive: bool = False) -> None:
        self._maybe_fail("revoke_grant")
        path = rm_last_slash(path)
        self._require(path)
        self.calls.append(("revoke_grant", path, principal, recursive))
        targets = self._subtree(path) if recursive else [path]
        for target in targets:
            self.grants[target].pop(principal, None)

    async def get_inheritance_flag(self, path: str) -> bool:
        self._maybe_fail("get_inheritance_flag")
        resource = self._require(path)
        if not resource.is_collection:
            raise NotFound("Collection", path)
        return resource.inherits

    async def set_inheritance_flag(self, path: str, enabled: bool) -> None:
        resource = self._require(path)
        self.calls.append(("set_inheritance_flag", resource.path, enabled))
        resource.inherits = enabled

    async def list_groups(self, principal: str) -> list[str]:
        return sorted(g for g, members in self.members.items() if principal in members)

    async def query_page(self, query: ListingQuery, offset: int) -> Page:
        self._maybe_fail("query_page")
        self.page_requests.append((query.kind, query.path, offset))
        children = sorted(
            p
            for p, r in self.resources.items()
            if r.kind is query.kind and p != "/" and dirname(p) == query.path
        )
        chunk = children[offset : offset + query.page_size]
        end = offset + len(chunk)
        return Page(
            rows=[
                ListingRow(
                    path=p,
                    kind=query.kind,
                    count=end,
                    is_last_result=end >= len(children) and i == len(chunk) - 1,
                )
                for i, p in enumerate(chunk)
            ]
        )

    async def move(self, src: str, dst: str) -> None:
        self._maybe_fail("move")
        src = rm_last_slash(src)
        dst = rm_last_slash(dst)
        self._require(src)
        self.calls.append(("move", src, dst))
        for old in self._subtree(src):
            new = dst + old[len(src) :]
            resource = self.resources.pop(old)
            resource.path = new
            self.resources[new] = resource
            self.grants[new] = self.grants.pop(old)
            if old in self.contents:
                self.contents[new] = self.contents.pop(old)

    async def open_input_stream(self, path: str) -> GridInputStream:
        data = self.contents[rm_last_slash(path)]

        async def chunks() -> AsyncIterator[bytes]:
            for i in range(0, len(data), 4):
                yield data[i : i + 4]

        return GridInputStream(path, chunks())

    async def close(self) -> None:
        self.close_count += 1


class FakeGridConnector:
    """Hands out one FakeStorageGrid, after raising each queued failure once."""

    def __init__(self, grid: FakeStorageGrid, failures: list[Exception] | None = None) -> None:
        self.grid = grid
        self.failures = list(failures or [])
        self.attempts = 0

    async def connect(self, context: RequestContext) -> FakeStorageGrid:
        self.attempts += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.grid


def build_home_tree(grid: FakeStorageGrid) -> None:
    """Zone skeleton: /z, /z/home, /z/trash/home/rods and the home of ``u``."""
    for path in ["/z", "/z/home", "/z/trash", "/z/trash/home", "/z/trash/home/rods"]:
        grid.add_collection(path)
    grid.add_collection("/z/home/u", grants={"u": PermissionLevel.OWN})


# --- Fixtures ---


@pytest.fixture
def grid() -> FakeStorageGrid:
    """Fake grid with the zone skeleton in place."""
    grid = FakeStorageGrid()
    build_home_tree(grid)
    return grid


@pytest.fixture
def connector(grid: FakeStorageGrid) -> FakeGridConnector:
    return FakeGridConnector(grid)


@pytest.fixture
def session_factory(connector: FakeGridConnector) -> SessionFactory:
    return SessionFactory(connector)


@pytest.fixture
def checker(grid: FakeStorageGrid) -> GridPermissionChecker:
    return GridPermissionChecker(grid)


@pytest.fixture
def settings() -> Settings:
    """Settings for zone ``z`` with ``rods`` as the session account and ``admin`` as admin."""
    return Settings(
        _env_file=None,
        zone="z",
        username="rods",
        admin_users=["admin"],
        page_size=2,
    )


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(correlation_id="test")


@pytest.fixture
def failing_remote() -> RemoteOperationError:
    return RemoteOperationError("revoke_grant", "/z/home/u", "server unavailable", 500)
