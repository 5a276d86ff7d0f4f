"""Move entry use cases - move or rename, then fix permissions."""

from collections.abc import Callable

from gridacl.application.ports import GridSessionFactory, PermissionChecker, StorageGrid
from gridacl.application.services.permission_propagator import PermissionPropagator
from gridacl.config import Settings
from gridacl.domain.exceptions import NotFound, ValidationError
from gridacl.domain.paths import basename, ensure_valid_path, path_join, rm_last_slash
from gridacl.domain.value_objects import PermissionFixPlan, RequestContext


class MoveEntryUseCase:
    """Move a collection or data object and bring permissions back in line."""

    def __init__(
        self,
        session_factory: GridSessionFactory,
        permission_checker_factory: Callable[[StorageGrid], PermissionChecker],
        settings: Settings,
    ) -> None:
        self._sessions = session_factory
        self._checker_factory = permission_checker_factory
        self._settings = settings

    async def execute(
        self,
        context: RequestContext,
        user: str,
        src: str,
        dst: str,
        skip_source_perms: bool = False,
    ) -> PermissionFixPlan | None:
        """Move src to dst as user. Returns the permission fix plan that was applied."""
        src = rm_last_slash(src)
        dst = rm_last_slash(dst)
        ensure_valid_path(src, dst)

        async with self._sessions.session(context) as session:
            grid = session.grid
            if await grid.stat(src) is None:
                raise NotFound("Path", src)
            if await grid.stat(dst) is not None:
                raise ValidationError(f"Destination already exists: {dst}")

            await grid.move(src, dst)

            propagator = PermissionPropagator.from_settings(
                grid, self._checker_factory(grid), self._settings, session.context
            )
            return await propagator.fix_perms(
                src, dst, user, self._settings.admin_users, skip_source_perms
            )


class MoveAllUseCase:
    """Move several entries into one collection."""

    def __init__(
        self,
        session_factory: GridSessionFactory,
        permission_checker_factory: Callable[[StorageGrid], PermissionChecker],
        settings: Settings,
    ) -> None:
        self._sessions = session_factory
        self._checker_factory = permission_checker_factory
        self._settings = settings

    async def execute(
        self,
        context: RequestContext,
        user: str,
        sources: list[str],
        dest_dir: str,
        skip_source_perms: bool = False,
    ) -> list[str]:
        """Move every source under dest_dir. Returns the new paths.

        All target paths are validated before anything is moved.
        """
        dest_dir = rm_last_slash(dest_dir)
        moves = [(rm_last_slash(s), path_join(dest_dir, basename(s))) for s in sources]
        ensure_valid_path(dest_dir, *(p for move in moves for p in move))

        async with self._sessions.session(context) as session:
            grid = session.grid
            if not await grid.is_collection(dest_dir):
                raise NotFound("Collection", dest_dir)
            checker = self._checker_factory(grid)
            for index, (src, dst) in enumerate(moves):
                await grid.move(src, dst)
                propagator = PermissionPropagator.from_settings(
                    grid, checker, self._settings, session.context.child(str(index))
                )
                await propagator.fix_perms(
                    src, dst, user, self._settings.admin_users, skip_source_perms
                )
        return [dst for _, dst in moves]
