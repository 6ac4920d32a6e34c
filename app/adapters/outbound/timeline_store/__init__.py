"""Timeline store outbound adapters."""

from app.adapters.outbound.timeline_store.in_memory_store import (
    InMemoryTimelineStore,
    InMemoryUnitOfWork,
)
from app.adapters.outbound.timeline_store.postgres_store import (
    PostgresTimelineStore,
    PostgresUnitOfWork,
)

__all__ = [
    "InMemoryTimelineStore",
    "InMemoryUnitOfWork",
    "PostgresTimelineStore",
    "PostgresUnitOfWork",
]
