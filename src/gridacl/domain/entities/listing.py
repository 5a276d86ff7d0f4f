"""Listing rows and pages returned by the grid's query endpoint."""

from dataclasses import dataclass, field

from gridacl.domain.entities.resource import ResourceKind


@dataclass(frozen=True)
class ListingRow:
    """One listed entry.

    ``count`` is the endpoint's own next-offset hint for the page this row
    closes; ``is_last_result`` marks the final row of the whole result set.
    """

    path: str
    kind: ResourceKind
    count: int = 0
    is_last_result: bool = False


@dataclass
class Page:
    """One page of listing rows."""

    rows: list[ListingRow] = field(default_factory=list)

    @property
    def is_last(self) -> bool:
        return not self.rows or self.rows[-1].is_last_result

    @property
    def next_offset(self) -> int:
        return self.rows[-1].count if self.rows else 0


@dataclass(frozen=True)
class ListingQuery:
    """Which entries to list under ``path`` and how many per page."""

    kind: ResourceKind
    path: str
    page_size: int = 500
