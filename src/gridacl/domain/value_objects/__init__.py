"""Domain value objects."""

from gridacl.domain.value_objects.fix_plan import PermissionFixPlan
from gridacl.domain.value_objects.path_length import PathLengthError, PathLengthErrorKind
from gridacl.domain.value_objects.permission_level import PermissionLevel
from gridacl.domain.value_objects.request_context import RequestContext

__all__ = [
    "PathLengthError",
    "PathLengthErrorKind",
    "PermissionFixPlan",
    "PermissionLevel",
    "RequestContext",
]
