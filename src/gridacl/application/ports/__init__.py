"""Application ports - interfaces for external adapters."""

from gridacl.application.ports.permission_checker import PermissionChecker
from gridacl.application.ports.session import GridSessionFactory, GridSessionHandle
from gridacl.application.ports.storage_grid import GridConnector, StorageGrid

__all__ = [
    "GridConnector",
    "GridSessionFactory",
    "GridSessionHandle",
    "PermissionChecker",
    "StorageGrid",
]
