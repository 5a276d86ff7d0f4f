"""Inheritance flag use cases."""

from gridacl.application.ports import GridSessionFactory
from gridacl.domain.exceptions import NotFound
from gridacl.domain.paths import ensure_valid_path, rm_last_slash
from gridacl.domain.value_objects import RequestContext


class SetInheritanceUseCase:
    """Turn ACL inheritance on or off for a collection."""

    def __init__(self, session_factory: GridSessionFactory) -> None:
        self._sessions = session_factory

    async def execute(self, context: RequestContext, path: str, enabled: bool = True) -> None:
        path = rm_last_slash(path)
        ensure_valid_path(path)
        async with self._sessions.session(context) as session:
            if not await session.grid.is_collection(path):
                raise NotFound("Collection", path)
            await session.grid.set_inheritance_flag(path, enabled)


class GetInheritanceUseCase:
    """Read a collection's ACL inheritance flag. False for data objects."""

    def __init__(self, session_factory: GridSessionFactory) -> None:
        self._sessions = session_factory

    async def execute(self, context: RequestContext, path: str) -> bool:
        path = rm_last_slash(path)
        ensure_valid_path(path)
        async with self._sessions.session(context) as session:
            if not await session.grid.is_collection(path):
                return False
            return await session.grid.get_inheritance_flag(path)
