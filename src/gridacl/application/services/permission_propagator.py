"""Permission propagation after an entry moves between collections.

The grid applies a collection's inheritance flag only when a child is
created, never when an entry is moved into it. After a move the grants on
the moved entry, and the traversal (read) grants on the collections above
the old and new locations, are brought back in line here.

Grants are re-read from the grid immediately before every change. A failing
remote call aborts the run; changes already applied stay in place.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from contextlib import aclosing

from gridacl.application.ports import PermissionChecker, StorageGrid
from gridacl.application.services.lazy_listing import DEFAULT_PAGE_SIZE, list_paths
from gridacl.config import Settings
from gridacl.domain.entities import AccessEntry
from gridacl.domain.paths import dirname, ensure_valid_path, path_join, rm_last_slash
from gridacl.domain.value_objects import PermissionFixPlan, PermissionLevel, RequestContext

logger = logging.getLogger(__name__)

ROOT = "/"


class PermissionPropagator:
    """Recomputes grants around a moved entry."""

    def __init__(
        self,
        grid: StorageGrid,
        checker: PermissionChecker,
        home_root: str,
        trash_root: str,
        context: RequestContext,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._grid = grid
        self._checker = checker
        self._home_root = rm_last_slash(home_root)
        self._trash_root = rm_last_slash(trash_root)
        self._context = context
        self._page_size = page_size

    @classmethod
    def from_settings(
        cls,
        grid: StorageGrid,
        checker: PermissionChecker,
        settings: Settings,
        context: RequestContext,
    ) -> "PermissionPropagator":
        return cls(
            grid,
            checker,
            home_root=settings.home_root,
            trash_root=settings.trash_root,
            context=context,
            page_size=settings.page_size,
        )

    def _log(self, level: int, msg: str, *args: object) -> None:
        logger.log(level, "[%s] " + msg, self._context.correlation_id, *args)

    async def fix_perms(
        self,
        src: str,
        dst: str,
        user: str,
        admin_users: Iterable[str] = (),
        skip_source_perms: bool = False,
    ) -> PermissionFixPlan | None:
        """Fix grants after ``src`` was moved to ``dst`` by ``user``.

        Returns the plan that was applied, or None when the entry stayed in
        the same parent collection.
        """
        src = rm_last_slash(src)
        dst = rm_last_slash(dst)
        ensure_valid_path(src, dst)
        admin_users = tuple(admin_users)

        src_dir = dirname(src)
        dst_dir = dirname(dst)
        if src_dir == dst_dir:
            self._log(logging.DEBUG, "%s renamed within %s, no permission fix needed", src, src_dir)
            return None

        plan = PermissionFixPlan.select(
            await self._grid.get_inheritance_flag(src_dir),
            await self._grid.get_inheritance_flag(dst_dir),
        )
        self._log(logging.INFO, "fixing permissions for %s -> %s with plan %s", src, dst, plan)

        if plan.cleans_source and not skip_source_perms:
            await self.remove_obsolete_perms(src, user, admin_users)

        match plan:
            case PermissionFixPlan.RESET_AND_INHERIT | PermissionFixPlan.CLEAN_SOURCE_RESET_AND_INHERIT:
                await self.reset_perms(dst, user, admin_users)
                await self.inherit_perms(dst, user, admin_users)
            case PermissionFixPlan.RESET_ONLY:
                await self.reset_perms(dst, user, admin_users)
            case PermissionFixPlan.CLEAN_SOURCE_MAKE_ACCESSIBLE:
                await self.make_accessible(dst, user, admin_users)
        return plan

    async def grantees(
        self, path: str, user: str, admin_users: Iterable[str] = ()
    ) -> list[AccessEntry]:
        """Grants on path, minus the acting user, the admins and the session account."""
        excluded = {user, self._grid.username, *admin_users}
        return [
            entry
            for entry in await self._grid.list_grants(path)
            if entry.principal not in excluded and entry.level > PermissionLevel.NONE
        ]

    async def reset_perms(self, path: str, user: str, admin_users: Iterable[str] = ()) -> None:
        """Strip every grantee's permission from path, recursively for collections."""
        recursive = await self._grid.is_collection(path)
        for entry in await self.grantees(path, user, admin_users):
            self._log(logging.DEBUG, "revoking %s on %s", entry.principal, path)
            await self._grid.revoke_grant(path, entry.principal, recursive=recursive)

    async def inherit_perms(self, path: str, user: str, admin_users: Iterable[str] = ()) -> None:
        """Copy the grants of path's parent onto path, recursively for collections."""
        parent = dirname(path)
        recursive = await self._grid.is_collection(path)
        for entry in await self.grantees(parent, user, admin_users):
            self._log(
                logging.DEBUG, "copying %s %s from %s to %s", entry.principal, entry.level.name, parent, path
            )
            await self._grid.set_grant(path, entry.principal, entry.level, recursive=recursive)

    async def remove_obsolete_perms(
        self, path: str, user: str, admin_users: Iterable[str] = ()
    ) -> None:
        """Drop read grants above path that no longer lead anywhere readable.

        For each grantee of path's parent, walk up from the parent and remove
        the grantee's read grant from every collection that holds no entry
        the grantee can still read. The walk stops at the first collection
        that still holds one, or at a base directory.
        """
        parent = dirname(path)
        for entry in await self.grantees(parent, user, admin_users):
            sharee = entry.principal
            base_dirs = {self._home_root, self._trash_root, path_join(self._home_root, sharee)}

            async def obsolete(dir_path: str, sharee: str = sharee, base_dirs: set[str] = base_dirs) -> bool:
                if dir_path in base_dirs:
                    return False
                return not await self.contains_accessible_obj(sharee, dir_path)

            async def unset_readable(dir_path: str, sharee: str = sharee) -> None:
                await self.set_readable(sharee, dir_path, False)

            await self._process_parent_dirs(unset_readable, obsolete, path)

    async def make_accessible(self, path: str, user: str, admin_users: Iterable[str] = ()) -> None:
        """Grant read on every collection above path to everyone who has access to path."""
        base_dirs = {self._home_root, self._trash_root}

        async def below_base(dir_path: str) -> bool:
            return dir_path not in base_dirs

        for entry in await self.grantees(path, user, admin_users):
            sharee = entry.principal

            async def set_readable(dir_path: str, sharee: str = sharee) -> None:
                await self.set_readable(sharee, dir_path, True)

            await self._process_parent_dirs(set_readable, below_base, path)

    async def contains_accessible_obj(self, principal: str, dir_path: str) -> bool:
        """True if any entry directly under dir_path is readable by principal."""
        async with aclosing(list_paths(self._grid, dir_path, self._page_size)) as rows:
            async for row in rows:
                if await self._checker.readable(principal, row.path):
                    return True
        return False

    async def set_readable(self, principal: str, path: str, readable: bool) -> None:
        """Add or drop a bare read grant. Write and own grants are left alone."""
        entries = await self._grid.list_grants(path)
        current = next(
            (e.level for e in entries if e.principal == principal), PermissionLevel.NONE
        )
        if readable:
            target = max(current, PermissionLevel.READ)
        else:
            target = PermissionLevel.NONE if current == PermissionLevel.READ else current
        if target == current:
            return
        self._log(logging.DEBUG, "setting %s to %s on %s", principal, target.name, path)
        if target == PermissionLevel.NONE:
            await self._grid.revoke_grant(path, principal, recursive=False)
        else:
            await self._grid.set_grant(path, principal, target, recursive=False)

    async def _process_parent_dirs(
        self,
        fn: Callable[[str], Awaitable[None]],
        should_process: Callable[[str], Awaitable[bool]],
        path: str,
    ) -> None:
        dir_path = dirname(path)
        while dir_path != ROOT and await should_process(dir_path):
            self._log(logging.DEBUG, "processing parent collection %s", dir_path)
            await fn(dir_path)
            dir_path = dirname(dir_path)
