"""Persistent event store: protocol and SQL implementation."""

from memex.store.database import DatabaseEventStore
from memex.store.protocol import EventStore, SupportsEmbeddingMaintenance

__all__ = [
    "DatabaseEventStore",
    "EventStore",
    "SupportsEmbeddingMaintenance",
]
