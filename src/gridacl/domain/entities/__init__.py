"""Domain entities."""

from gridacl.domain.entities.access_entry import AccessEntry, EffectiveGrant, UserPermissions
from gridacl.domain.entities.input_stream import GridInputStream
from gridacl.domain.entities.listing import ListingQuery, ListingRow, Page
from gridacl.domain.entities.resource import Resource, ResourceKind

__all__ = [
    "AccessEntry",
    "EffectiveGrant",
    "GridInputStream",
    "ListingQuery",
    "ListingRow",
    "Page",
    "Resource",
    "ResourceKind",
    "UserPermissions",
]
