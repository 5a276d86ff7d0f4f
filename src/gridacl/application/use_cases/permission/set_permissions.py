"""Set permissions use case."""

from collections.abc import Callable

from gridacl.application.ports import GridSessionFactory, PermissionChecker, StorageGrid
from gridacl.domain.entities import EffectiveGrant
from gridacl.domain.exceptions import NotFound, PermissionDenied
from gridacl.domain.paths import ensure_valid_path, rm_last_slash
from gridacl.domain.value_objects import PermissionLevel, RequestContext


class SetPermissionsUseCase:
    """Replace a principal's explicit grant on a path."""

    def __init__(
        self,
        session_factory: GridSessionFactory,
        permission_checker_factory: Callable[[StorageGrid], PermissionChecker],
        admin_users: list[str] | None = None,
    ) -> None:
        self._sessions = session_factory
        self._checker_factory = permission_checker_factory
        self._admin_users = set(admin_users or [])

    async def execute(
        self,
        context: RequestContext,
        actor: str,
        principal: str,
        path: str,
        read: bool,
        write: bool,
        own: bool,
        recursive: bool = False,
    ) -> EffectiveGrant:
        """Grant the highest level among read/write/own. Actor must own path or be an admin.

        All flags false removes the principal's grant.
        """
        path = rm_last_slash(path)
        ensure_valid_path(path)
        level = PermissionLevel.from_flags(read, write, own)

        async with self._sessions.session(context) as session:
            grid = session.grid
            resource = await grid.stat(path)
            if resource is None:
                raise NotFound("Path", path)
            if actor not in self._admin_users and not await self._checker_factory(grid).owns(
                actor, path
            ):
                raise PermissionDenied(f"User {actor} does not own {path}")

            recursive = recursive and resource.is_collection
            if level == PermissionLevel.NONE:
                await grid.revoke_grant(path, principal, recursive=recursive)
            else:
                await grid.set_grant(path, principal, level, recursive=recursive)
            return EffectiveGrant.from_level(level)
