"""Request-scoped context threaded through every grid call."""

from dataclasses import dataclass, field
from uuid import uuid4


def _new_correlation_id() -> str:
    return uuid4().hex[:12]


@dataclass(frozen=True)
class RequestContext:
    """Immutable per-request values, passed explicitly instead of held globally."""

    correlation_id: str = field(default_factory=_new_correlation_id)

    def child(self, suffix: str) -> "RequestContext":
        """Derive a context for a sub-operation, keeping the parent id visible."""
        return RequestContext(correlation_id=f"{self.correlation_id}.{suffix}")
