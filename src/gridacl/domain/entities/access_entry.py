"""Access entries and the grants derived from them."""

from dataclasses import dataclass

from gridacl.domain.value_objects import PermissionLevel


@dataclass(frozen=True)
class AccessEntry:
    """Explicit grant of one principal on one path."""

    principal: str
    path: str
    level: PermissionLevel


@dataclass(frozen=True)
class EffectiveGrant:
    """Read/write/own flags. Only built from a level, so own => write => read."""

    read: bool = False
    write: bool = False
    own: bool = False

    @classmethod
    def from_level(cls, level: PermissionLevel) -> "EffectiveGrant":
        return cls(
            read=level >= PermissionLevel.READ,
            write=level >= PermissionLevel.WRITE,
            own=level == PermissionLevel.OWN,
        )

    @property
    def level(self) -> PermissionLevel:
        return PermissionLevel.from_flags(self.read, self.write, self.own)

    def to_dict(self) -> dict[str, bool]:
        return {"read": self.read, "write": self.write, "own": self.own}


@dataclass(frozen=True)
class UserPermissions:
    """One principal's explicit grant on a path, as flags."""

    user: str
    permissions: EffectiveGrant
