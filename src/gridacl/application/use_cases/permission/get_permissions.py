"""Permission lookup use cases."""

from collections.abc import Callable

from gridacl.application.ports import GridSessionFactory, PermissionChecker, StorageGrid
from gridacl.domain.entities import EffectiveGrant, UserPermissions
from gridacl.domain.exceptions import NotFound
from gridacl.domain.paths import ensure_valid_path, rm_last_slash
from gridacl.domain.value_objects import RequestContext


class GetPermissionsUseCase:
    """Effective permissions of one principal on a path."""

    def __init__(
        self,
        session_factory: GridSessionFactory,
        permission_checker_factory: Callable[[StorageGrid], PermissionChecker],
    ) -> None:
        self._sessions = session_factory
        self._checker_factory = permission_checker_factory

    async def execute(self, context: RequestContext, principal: str, path: str) -> EffectiveGrant:
        path = rm_last_slash(path)
        ensure_valid_path(path)
        async with self._sessions.session(context) as session:
            return await self._checker_factory(session.grid).permissions(principal, path)


class ListUserPermissionsUseCase:
    """Every explicit grant on a path."""

    def __init__(
        self,
        session_factory: GridSessionFactory,
        permission_checker_factory: Callable[[StorageGrid], PermissionChecker],
    ) -> None:
        self._sessions = session_factory
        self._checker_factory = permission_checker_factory

    async def execute(self, context: RequestContext, path: str) -> list[UserPermissions]:
        path = rm_last_slash(path)
        ensure_valid_path(path)
        async with self._sessions.session(context) as session:
            if await session.grid.stat(path) is None:
                raise NotFound("Path", path)
            return await self._checker_factory(session.grid).list_user_permissions(path)
