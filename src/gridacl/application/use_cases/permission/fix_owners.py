"""Fix owners use case - make a given set of principals the only owners of a path."""

from collections.abc import Callable

from gridacl.application.ports import GridSessionFactory, PermissionChecker, StorageGrid
from gridacl.domain.exceptions import NotFound, PermissionDenied
from gridacl.domain.paths import ensure_valid_path, rm_last_slash
from gridacl.domain.value_objects import PermissionLevel, RequestContext


class FixOwnersUseCase:
    """Remove every other principal's grant, then give each owner ``own``."""

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
        self, context: RequestContext, actor: str, path: str, owners: list[str]
    ) -> list[str]:
        """Returns the principals whose grants were removed."""
        path = rm_last_slash(path)
        ensure_valid_path(path)
        new_owners = list(dict.fromkeys(owners))

        async with self._sessions.session(context) as session:
            grid = session.grid
            resource = await grid.stat(path)
            if resource is None:
                raise NotFound("Path", path)
            if actor not in self._admin_users and not await self._checker_factory(grid).owns(
                actor, path
            ):
                raise PermissionDenied(f"User {actor} does not own {path}")

            removed = [
                e.principal
                for e in await grid.list_grants(path)
                if e.principal not in new_owners
            ]
            for principal in removed:
                await grid.revoke_grant(path, principal, recursive=False)
            for owner in new_owners:
                await grid.set_grant(
                    path, owner, PermissionLevel.OWN, recursive=resource.is_collection
                )
            return removed
