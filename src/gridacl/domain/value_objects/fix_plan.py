"""Permission fix plan chosen after an entry changes parent collection."""

from enum import StrEnum


class PermissionFixPlan(StrEnum):
    """What to do with grants, keyed by the inheritance flags of both parents."""

    RESET_AND_INHERIT = "reset_and_inherit"
    RESET_ONLY = "reset_only"
    CLEAN_SOURCE_RESET_AND_INHERIT = "clean_source_reset_and_inherit"
    CLEAN_SOURCE_MAKE_ACCESSIBLE = "clean_source_make_accessible"

    @classmethod
    def select(cls, src_inherits: bool, dst_inherits: bool) -> "PermissionFixPlan":
        match (bool(src_inherits), bool(dst_inherits)):
            case (True, True):
                return cls.RESET_AND_INHERIT
            case (True, False):
                return cls.RESET_ONLY
            case (False, True):
                return cls.CLEAN_SOURCE_RESET_AND_INHERIT
            case (False, False):
                return cls.CLEAN_SOURCE_MAKE_ACCESSIBLE

    @property
    def cleans_source(self) -> bool:
        """Whether obsolete read grants above the source are removed."""
        return self in (
            PermissionFixPlan.CLEAN_SOURCE_RESET_AND_INHERIT,
            PermissionFixPlan.CLEAN_SOURCE_MAKE_ACCESSIBLE,
        )
