"""Resource entity - a collection or data object in the grid namespace."""

from dataclasses import dataclass
from enum import StrEnum


class ResourceKind(StrEnum):
    """Kinds of nodes in the grid namespace."""

    COLLECTION = "collection"
    DATA_OBJECT = "data_object"


@dataclass
class Resource:
    """Resource - absolute path plus kind; collections carry the inheritance flag."""

    path: str
    kind: ResourceKind
    inherits: bool = False

    @property
    def is_collection(self) -> bool:
        return self.kind is ResourceKind.COLLECTION
