"""Application entry point and composition root."""

import logging
from dataclasses import dataclass

import httpx

from gridacl import __version__
from gridacl.application.use_cases.entry.move_entry import MoveAllUseCase, MoveEntryUseCase
from gridacl.application.use_cases.entry.open_input_stream import OpenInputStreamUseCase
from gridacl.application.use_cases.listing.list_directory import ListDirectoryUseCase
from gridacl.application.use_cases.permission.fix_owners import FixOwnersUseCase
from gridacl.application.use_cases.permission.fix_permissions import FixPermissionsUseCase
from gridacl.application.use_cases.permission.get_permissions import (
    GetPermissionsUseCase,
    ListUserPermissionsUseCase,
)
from gridacl.application.use_cases.permission.set_inheritance import (
    GetInheritanceUseCase,
    SetInheritanceUseCase,
)
from gridacl.application.use_cases.permission.set_permissions import SetPermissionsUseCase
from gridacl.config import Settings, get_settings
from gridacl.infrastructure.grid.http_grid import HttpGridConnector
from gridacl.infrastructure.grid.session import SessionFactory
from gridacl.infrastructure.permission.permission_checker import GridPermissionChecker

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class GridACL:
    """Wired use cases."""

    move_entry: MoveEntryUseCase
    move_all: MoveAllUseCase
    fix_permissions: FixPermissionsUseCase
    set_permissions: SetPermissionsUseCase
    fix_owners: FixOwnersUseCase
    get_permissions: GetPermissionsUseCase
    list_user_permissions: ListUserPermissionsUseCase
    set_inheritance: SetInheritanceUseCase
    get_inheritance: GetInheritanceUseCase
    list_directory: ListDirectoryUseCase
    open_input_stream: OpenInputStreamUseCase


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    configure_logging(settings)
    print(f"gridacl v{__version__} ({settings.environment}) -> {settings.grid_url}")


def create_gridacl(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GridACL:
    """Composition root - build use cases with all dependencies."""
    settings = settings or get_settings()
    connector = HttpGridConnector.from_settings(settings, transport=transport)
    sessions = SessionFactory.from_settings(connector, settings)
    checker_factory = GridPermissionChecker

    return GridACL(
        move_entry=MoveEntryUseCase(sessions, checker_factory, settings),
        move_all=MoveAllUseCase(sessions, checker_factory, settings),
        fix_permissions=FixPermissionsUseCase(sessions, checker_factory, settings),
        set_permissions=SetPermissionsUseCase(sessions, checker_factory, settings.admin_users),
        fix_owners=FixOwnersUseCase(sessions, checker_factory, settings.admin_users),
        get_permissions=GetPermissionsUseCase(sessions, checker_factory),
        list_user_permissions=ListUserPermissionsUseCase(sessions, checker_factory),
        set_inheritance=SetInheritanceUseCase(sessions),
        get_inheritance=GetInheritanceUseCase(sessions),
        list_directory=ListDirectoryUseCase(sessions, page_size=settings.page_size),
        open_input_stream=OpenInputStreamUseCase(sessions, checker_factory),
    )
