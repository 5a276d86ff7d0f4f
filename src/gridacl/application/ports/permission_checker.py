"""Permission checker port - effective grants of principals on grid paths."""

from typing import Protocol

from gridacl.domain.entities import EffectiveGrant, UserPermissions


class PermissionChecker(Protocol):
    """Port for checking principal permissions on grid paths."""

    async def effective_grant(self, principal: str, path: str) -> EffectiveGrant: ...

    async def permissions(self, principal: str, path: str) -> EffectiveGrant: ...

    async def readable(self, principal: str, path: str) -> bool: ...

    async def writable(self, principal: str, path: str) -> bool: ...

    async def owns(self, principal: str, path: str) -> bool: ...

    async def list_user_permissions(self, path: str) -> list[UserPermissions]: ...
