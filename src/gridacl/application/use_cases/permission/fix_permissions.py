"""Fix permissions use case - propagation for a move done elsewhere."""

from collections.abc import Callable

from gridacl.application.ports import GridSessionFactory, PermissionChecker, StorageGrid
from gridacl.application.services.permission_propagator import PermissionPropagator
from gridacl.config import Settings
from gridacl.domain.value_objects import PermissionFixPlan, RequestContext


class FixPermissionsUseCase:
    """Recompute grants after src was moved to dst by user."""

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
        async with self._sessions.session(context) as session:
            propagator = PermissionPropagator.from_settings(
                session.grid,
                self._checker_factory(session.grid),
                self._settings,
                session.context,
            )
            return await propagator.fix_perms(
                src, dst, user, self._settings.admin_users, skip_source_perms
            )
