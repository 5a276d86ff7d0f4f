"""Storage grid adapter for the iRODS HTTP API."""

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

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
from gridacl.domain.exceptions import (
    ConnectError,
    NotFound,
    RemoteOperationError,
    ValidationError,
)
from gridacl.domain.paths import path_join, rm_last_slash
from gridacl.domain.value_objects import PermissionLevel, RequestContext

logger = logging.getLogger(__name__)

_ENDPOINTS = {
    ResourceKind.COLLECTION: "/collections",
    ResourceKind.DATA_OBJECT: "/data-objects",
}


def _literal(value: str) -> str:
    """Quote a genquery string literal. The query language has no quote escape."""
    if "'" in value:
        raise ValidationError(f"Single quotes are not supported in grid queries: {value}")
    return f"'{value}'"


def _subtree_prefix(path: str) -> str:
    return "/" if path == "/" else path + "/"


def _like_subtree(path: str) -> str:
    """LIKE operand matching everything below path, with wildcards in path escaped."""
    escaped = path.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return _literal(_subtree_prefix(escaped) + "%")


def _listing_sql(query: ListingQuery) -> str:
    if query.kind is ResourceKind.COLLECTION:
        return f"SELECT COLL_NAME WHERE COLL_PARENT_NAME = {_literal(query.path)}"
    return f"SELECT COLL_NAME, DATA_NAME WHERE COLL_NAME = {_literal(query.path)}"


def _row_path(kind: ResourceKind, row: list[str]) -> str:
    if kind is ResourceKind.COLLECTION:
        return row[0]
    return path_join(row[0], row[1])


class HttpStorageGrid:
    """One authenticated connection to the iRODS HTTP API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        username: str,
        zone: str,
        page_size: int = 500,
    ) -> None:
        self._client = client
        self._username = username
        self._zone = zone
        self._page_size = page_size

    @property
    def username(self) -> str:
        return self._username

    @property
    def zone(self) -> str:
        return self._zone

    async def _call(
        self,
        method: str,
        endpoint: str,
        op: str,
        path: str | None,
        params: dict[str, Any],
        check: bool = True,
    ) -> dict[str, Any]:
        payload = {"op": op, **params}
        try:
            if method == "GET":
                response = await self._client.get(endpoint, params=payload)
            else:
                response = await self._client.post(endpoint, data=payload)
        except httpx.HTTPError as e:
            raise RemoteOperationError(op, path, str(e)) from e
        if response.status_code >= 400 and (check or response.status_code >= 500):
            raise RemoteOperationError(
                op, path, response.text or response.reason_phrase, response.status_code
            )
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteOperationError(op, path, "invalid JSON response") from e
        status = body.get("irods_response", {}).get("status_code", 0)
        if check and status != 0:
            message = body["irods_response"].get("status_message") or f"status {status}"
            raise RemoteOperationError(op, path, message, status)
        return body

    async def _stat_as(self, kind: ResourceKind, path: str) -> dict[str, Any] | None:
        body = await self._call("GET", _ENDPOINTS[kind], "stat", path, {"lpath": path}, check=False)
        if body.get("irods_response", {}).get("status_code", 0) != 0:
            return None
        if kind is ResourceKind.COLLECTION and body.get("type") not in (None, "collection"):
            return None
        return body

    async def _stat_body(self, path: str) -> tuple[ResourceKind, dict[str, Any]] | None:
        for kind in (ResourceKind.COLLECTION, ResourceKind.DATA_OBJECT):
            body = await self._stat_as(kind, path)
            if body is not None:
                return kind, body
        return None

    async def _require(self, path: str) -> tuple[ResourceKind, dict[str, Any]]:
        found = await self._stat_body(path)
        if found is None:
            raise NotFound("Path", path)
        return found

    async def stat(self, path: str) -> Resource | None:
        path = rm_last_slash(path)
        found = await self._stat_body(path)
        if found is None:
            return None
        kind, body = found
        return Resource(
            path=path,
            kind=kind,
            inherits=bool(body.get("inheritance_enabled", False)),
        )

    async def is_collection(self, path: str) -> bool:
        return await self._stat_as(ResourceKind.COLLECTION, rm_last_slash(path)) is not None

    async def is_data_object(self, path: str) -> bool:
        return await self._stat_as(ResourceKind.DATA_OBJECT, rm_last_slash(path)) is not None

    async def list_grants(self, path: str) -> list[AccessEntry]:
        path = rm_last_slash(path)
        _, body = await self._require(path)
        entries = []
        for perm in body.get("permissions", []):
            name = perm["name"]
            if perm.get("zone") and perm["zone"] != self._zone:
                name = f"{name}#{perm['zone']}"
            try:
                level = PermissionLevel.from_grid(perm["perm"])
            except ValueError as e:
                raise RemoteOperationError("list_grants", path, str(e)) from e
            entries.append(AccessEntry(principal=name, path=path, level=level))
        return entries

    async def _set_permission(
        self, kind: ResourceKind, path: str, principal: str, level: PermissionLevel
    ) -> None:
        await self._call(
            "POST",
            _ENDPOINTS[kind],
            "set_permission",
            path,
            {
                "lpath": path,
                "entity-name": principal,
                "permission": level.to_grid(),
                "admin": 1,
            },
        )

    async def _genquery_all(self, sql: str, path: str | None) -> AsyncIterator[list[str]]:
        offset = 0
        while True:
            rows = await self._genquery(sql, offset, self._page_size, path)
            for row in rows:
                yield row
            if len(rows) < self._page_size:
                return
            offset += len(rows)

    async def _descendants(self, path: str) -> AsyncIterator[tuple[ResourceKind, str]]:
        """Every collection and data object below path."""
        below = _like_subtree(path)
        queries = [
            (ResourceKind.COLLECTION, f"SELECT COLL_NAME WHERE COLL_NAME like {below}"),
            (ResourceKind.DATA_OBJECT, f"SELECT COLL_NAME, DATA_NAME WHERE COLL_NAME = {_literal(path)}"),
            (ResourceKind.DATA_OBJECT, f"SELECT COLL_NAME, DATA_NAME WHERE COLL_NAME like {below}"),
        ]
        prefix = _subtree_prefix(path)
        for kind, sql in queries:
            async for row in self._genquery_all(sql, path):
                child = _row_path(kind, row)
                # servers that ignore the escape still match wildcard siblings
                if not child.startswith(prefix):
                    logger.warning("skipping %s, not below %s", child, path)
                    continue
                yield kind, child

    async def set_grant(
        self, path: str, principal: str, level: PermissionLevel, recursive: bool = False
    ) -> None:
        path = rm_last_slash(path)
        kind, _ = await self._require(path)
        recursive = recursive and kind is ResourceKind.COLLECTION
        if recursive:
            _literal(path)
        await self._set_permission(kind, path, principal, level)
        if recursive:
            async for child_kind, child in self._descendants(path):
                await self._set_permission(child_kind, child, principal, level)

    async def revoke_grant(self, path: str, principal: str, recursive: bool = False) -> None:
        await self.set_grant(path, principal, PermissionLevel.NONE, recursive=recursive)

    async def get_inheritance_flag(self, path: str) -> bool:
        path = rm_last_slash(path)
        body = await self._stat_as(ResourceKind.COLLECTION, path)
        if body is None:
            raise NotFound("Collection", path)
        return bool(body.get("inheritance_enabled", False))

    async def set_inheritance_flag(self, path: str, enabled: bool) -> None:
        path = rm_last_slash(path)
        await self._call(
            "POST",
            "/collections",
            "set_inheritance",
            path,
            {"lpath": path, "enable": int(enabled), "admin": 1},
        )

    async def list_groups(self, principal: str) -> list[str]:
        sql = f"SELECT USER_GROUP_NAME WHERE USER_NAME = {_literal(principal)}"
        return [
            row[0] async for row in self._genquery_all(sql, None) if row and row[0] != principal
        ]

    async def _genquery(self, sql: str, offset: int, count: int, path: str | None) -> list[list[str]]:
        body = await self._call(
            "GET",
            "/query",
            "execute_genquery",
            path,
            {"query": sql, "offset": offset, "count": count},
        )
        return body.get("rows", [])

    async def query_page(self, query: ListingQuery, offset: int) -> Page:
        """One page of a listing.

        The query endpoint reports no total, so a page is only known to be
        the last one when it comes back short. A listing whose size is an
        exact multiple of the page size ends with one extra, empty page.
        """
        rows = await self._genquery(_listing_sql(query), offset, query.page_size, query.path)
        last = len(rows) < query.page_size
        return Page(
            rows=[
                ListingRow(
                    path=_row_path(query.kind, row),
                    kind=query.kind,
                    count=offset + i + 1,
                    is_last_result=last and i == len(rows) - 1,
                )
                for i, row in enumerate(rows)
            ]
        )

    async def move(self, src: str, dst: str) -> None:
        src = rm_last_slash(src)
        dst = rm_last_slash(dst)
        kind, _ = await self._require(src)
        await self._call(
            "POST",
            _ENDPOINTS[kind],
            "rename",
            src,
            {"old-lpath": src, "new-lpath": dst},
        )

    async def open_input_stream(self, path: str) -> GridInputStream:
        path = rm_last_slash(path)
        request = self._client.build_request(
            "GET", "/data-objects", params={"op": "read", "lpath": path}
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise RemoteOperationError("read", path, str(e)) from e
        if response.status_code >= 400:
            await response.aread()
            await response.aclose()
            raise RemoteOperationError("read", path, response.text, response.status_code)
        return GridInputStream(path, response.aiter_bytes(), response.aclose)

    async def close(self) -> None:
        await self._client.aclose()


class HttpGridConnector:
    """Authenticates against the iRODS HTTP API and hands out connections."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        zone: str,
        timeout: float = 30.0,
        page_size: int = 500,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._zone = zone
        self._timeout = timeout
        self._page_size = page_size
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "HttpGridConnector":
        return cls(
            base_url=settings.grid_url,
            username=settings.username,
            password=settings.password,
            zone=settings.zone,
            timeout=settings.request_timeout,
            page_size=settings.page_size,
            transport=transport,
        )

    async def connect(self, context: RequestContext) -> HttpStorageGrid:
        client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"X-Correlation-ID": context.correlation_id},
        )
        try:
            response = await client.post(
                "/authenticate", auth=(self._username, self._password)
            )
        except httpx.ConnectError as e:
            await client.aclose()
            raise ConnectError(f"cannot reach {self._base_url}: {e}", retryable=True) from e
        except httpx.HTTPError as e:
            await client.aclose()
            raise ConnectError(f"authentication request failed: {e}") from e
        if response.status_code != 200:
            await client.aclose()
            raise ConnectError(
                f"authentication failed for {self._username}: HTTP {response.status_code}"
            )
        client.headers["Authorization"] = f"Bearer {response.text.strip()}"
        logger.debug("[%s] authenticated as %s", context.correlation_id, self._username)
        return HttpStorageGrid(client, self._username, self._zone, self._page_size)
