"""Open input stream use case."""

from collections.abc import Callable

from gridacl.application.ports import GridSessionFactory, PermissionChecker, StorageGrid
from gridacl.domain.entities import GridInputStream
from gridacl.domain.exceptions import NotFound, PermissionDenied
from gridacl.domain.paths import ensure_valid_path, rm_last_slash
from gridacl.domain.value_objects import RequestContext


class OpenInputStreamUseCase:
    """Open a data object for reading. The session closes when the stream does."""

    def __init__(
        self,
        session_factory: GridSessionFactory,
        permission_checker_factory: Callable[[StorageGrid], PermissionChecker],
    ) -> None:
        self._sessions = session_factory
        self._checker_factory = permission_checker_factory

    async def execute(self, context: RequestContext, user: str, path: str) -> GridInputStream:
        path = rm_last_slash(path)
        ensure_valid_path(path)

        async def open_stream(grid: StorageGrid) -> GridInputStream:
            if not await grid.is_data_object(path):
                raise NotFound("Data object", path)
            if not await self._checker_factory(grid).readable(user, path):
                raise PermissionDenied(f"User {user} cannot read {path}")
            return await grid.open_input_stream(path)

        session = await self._sessions.open(context)
        return await session.run(open_stream)
