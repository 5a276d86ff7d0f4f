"""Permission levels a principal can hold on a grid resource."""

from enum import IntEnum

# Finer-grained grid levels folded onto the four levels used here. Metadata
# levels above read_object still grant reading the object.
_ALIASES = {
    "null": "none",
    "read_metadata": "none",
    "read_object": "read",
    "create_metadata": "read",
    "modify_metadata": "read",
    "delete_metadata": "read",
    "create_object": "write",
    "modify_object": "write",
    "delete_object": "write",
}


class PermissionLevel(IntEnum):
    """Totally ordered grant levels: NONE < READ < WRITE < OWN."""

    NONE = 0
    READ = 1
    WRITE = 2
    OWN = 3

    @classmethod
    def from_grid(cls, name: str) -> "PermissionLevel":
        """Parse a permission name as reported by the grid."""
        key = name.strip().lower().replace(" ", "_")
        key = _ALIASES.get(key, key)
        try:
            return cls[key.upper()]
        except KeyError:
            raise ValueError(f"Unknown permission name: {name!r}") from None

    @classmethod
    def from_flags(cls, read: bool, write: bool, own: bool) -> "PermissionLevel":
        """Highest level among the flags that are set."""
        if own:
            return cls.OWN
        if write:
            return cls.WRITE
        if read:
            return cls.READ
        return cls.NONE

    def to_grid(self) -> str:
        """Name used when sending the level to the grid."""
        return "null" if self is PermissionLevel.NONE else self.name.lower()
