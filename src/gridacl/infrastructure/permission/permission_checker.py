"""Permission checker implementation - effective grants from the grid's ACLs."""

from gridacl.application.ports import StorageGrid
from gridacl.domain.entities import EffectiveGrant, UserPermissions
from gridacl.domain.paths import ensure_valid_path, rm_last_slash
from gridacl.domain.value_objects import PermissionLevel


class GridPermissionChecker:
    """Resolves a principal's effective grant over its own and its groups' entries."""

    def __init__(self, grid: StorageGrid) -> None:
        self._grid = grid

    async def principal_closure(self, principal: str) -> set[str]:
        """The principal plus every group it belongs to."""
        groups = await self._grid.list_groups(principal)
        return {principal, *groups}

    async def effective_level(self, principal: str, path: str) -> PermissionLevel:
        path = rm_last_slash(path)
        ensure_valid_path(path)
        closure = await self.principal_closure(principal)
        entries = await self._grid.list_grants(path)
        return max(
            (e.level for e in entries if e.principal in closure),
            default=PermissionLevel.NONE,
        )

    async def effective_grant(self, principal: str, path: str) -> EffectiveGrant:
        """Effective read/write/own of principal on path."""
        return EffectiveGrant.from_level(await self.effective_level(principal, path))

    async def permissions(self, principal: str, path: str) -> EffectiveGrant:
        """Effective grant, or all-false when the path does not exist."""
        path = rm_last_slash(path)
        ensure_valid_path(path)
        if await self._grid.stat(path) is None:
            return EffectiveGrant()
        return await self.effective_grant(principal, path)

    async def readable(self, principal: str, path: str) -> bool:
        return (await self.permissions(principal, path)).read

    async def writable(self, principal: str, path: str) -> bool:
        return (await self.permissions(principal, path)).write

    async def owns(self, principal: str, path: str) -> bool:
        return (await self.permissions(principal, path)).own

    async def paths_writable(self, principal: str, paths: list[str]) -> bool:
        """True if principal can write every path."""
        ensure_valid_path(*paths)
        for path in paths:
            if not await self.writable(principal, path):
                return False
        return True

    async def list_user_permissions(self, path: str) -> list[UserPermissions]:
        """Explicit grants on path, one entry per principal."""
        path = rm_last_slash(path)
        ensure_valid_path(path)
        return [
            UserPermissions(user=e.principal, permissions=EffectiveGrant.from_level(e.level))
            for e in await self._grid.list_grants(path)
        ]
