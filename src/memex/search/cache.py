"""VectorCache: process-lifetime map from event id to embedding vector."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from memex.store.protocol import EventStore

logger = logging.getLogger(__name__)


class CacheState(Enum):
    """Lifecycle of a :class:`VectorCache`."""

    EMPTY = "empty"
    LOADED = "loaded"


class VectorCache:
    """In-memory copy of every persisted embedding.

    The first :meth:`get` reads the complete persisted set in one pass.
    :meth:`invalidate` discards the mapping so the next :meth:`get`
    reloads.  :meth:`put` updates a loaded cache in place.

    Cached arrays are private copies; they never share memory with the
    buffers handed out by the store.  No locking: the cache is meant to
    be used from a single event loop.
    """

    def __init__(self, store: EventStore, *, dimensions: int) -> None:
        self._store = store
        self._dimensions = dimensions
        self._entries: dict[str, np.ndarray] | None = None
        # Bumped on invalidate/put so a load that raced them is not installed
        self._generation = 0

    @property
    def state(self) -> CacheState:
        return CacheState.EMPTY if self._entries is None else CacheState.LOADED

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def get(self) -> dict[str, np.ndarray]:
        """Return the mapping, loading it from the store first if needed."""
        if self._entries is not None:
            return self._entries

        generation = self._generation
        entries = await self._load()
        if generation == self._generation:
            self._entries = entries
        return entries

    def put(self, event_id: str, vector: Sequence[float] | np.ndarray) -> None:
        """Insert or overwrite one entry.

        On an empty cache this only marks any in-flight load as stale; the
        next :meth:`get` reads the vector back from the store.
        """
        arr = self._own(vector)
        if self._entries is None:
            self._generation += 1
            return
        self._entries[event_id] = arr

    def invalidate(self) -> None:
        """Drop the whole mapping; the next :meth:`get` reloads."""
        self._entries = None
        self._generation += 1

    def __len__(self) -> int:
        return 0 if self._entries is None else len(self._entries)

    async def _load(self) -> dict[str, np.ndarray]:
        rows = await self._store.get_all_embeddings()
        entries: dict[str, np.ndarray] = {}
        for row in rows:
            if len(row.vector) != self._dimensions:
                logger.warning(
                    "Skipping embedding for %s: %d dimensions, expected %d",
                    row.event_id,
                    len(row.vector),
                    self._dimensions,
                )
                continue
            entries[row.event_id] = self._own(row.vector)
        logger.debug("Loaded %d embeddings into vector cache", len(entries))
        return entries

    def _own(self, vector: Sequence[float] | np.ndarray) -> np.ndarray:
        arr = np.array(vector, dtype=np.float32, copy=True)
        if arr.shape != (self._dimensions,):
            msg = f"Expected a {self._dimensions}-dimension vector, got shape {arr.shape}"
            raise ValueError(msg)
        return arr
