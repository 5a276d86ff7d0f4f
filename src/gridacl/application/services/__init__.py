"""Application services shared by use cases."""

from gridacl.application.services.lazy_listing import (
    list_files_in,
    list_paths,
    list_subdirs_in,
    stream_pages,
)
from gridacl.application.services.permission_propagator import PermissionPropagator

__all__ = [
    "PermissionPropagator",
    "list_files_in",
    "list_paths",
    "list_subdirs_in",
    "stream_pages",
]
