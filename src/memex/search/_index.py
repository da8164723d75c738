"""MemoryIndex: semantic index over life events.

Wires the text composer, an embedding provider, the event store and the
vector cache together, and runs the rebuild pipeline.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from memex.config import EmbeddingSettings
from memex.events import ChangeType, EventBus, EventChange
from memex.exceptions import ConfigurationError, ProviderError
from memex.search.cache import VectorCache
from memex.search.composer import TextComposer
from memex.search.providers.openai import OpenAIEmbedding
from memex.search.similarity import rank
from memex.search.types import RebuildResult, SearchHit
from memex.store.protocol import SupportsEmbeddingMaintenance

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    import numpy as np

    from memex.search.protocols import EmbeddingProvider
    from memex.store.protocol import EventStore

logger = logging.getLogger(__name__)


class MemoryIndex:
    """Nearest-neighbour index over embedded events.

    With an injected *provider* the index is always configured.  Without
    one, the provider is built from :class:`EmbeddingSettings`, which are
    re-resolved from the AI settings file on every check so a key saved at
    runtime is picked up without a restart.

    Typical use::

        store = DatabaseEventStore(create_async_engine("sqlite+aiosqlite:///memex.db"))
        index = MemoryIndex(store)
        if index.is_configured():
            await index.rebuild()
        hits = await index.search_text("dinner with Sam", limit=10)
    """

    def __init__(
        self,
        store: EventStore,
        provider: EmbeddingProvider | None = None,
        *,
        settings: EmbeddingSettings | None = None,
        config_path: str | Path | None = None,
    ) -> None:
        self._store = store
        self._injected_provider = provider
        self._fixed_settings = settings
        self._config_path = config_path

        self._provider: OpenAIEmbedding | None = None
        self._provider_key: str | None = None

        base = settings or EmbeddingSettings()
        dimensions = provider.dimensions if provider is not None else base.dimensions
        self._batch_size = base.batch_size
        self._composer = TextComposer(store, max_chars=base.max_input_chars)
        self._cache = VectorCache(store, dimensions=dimensions)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def is_configured(self) -> bool:
        """Return whether an embedding provider credential is available."""
        if self._injected_provider is not None:
            return True
        return self._settings().is_configured

    @property
    def model_name(self) -> str:
        if self._injected_provider is not None:
            return self._injected_provider.model_name
        return self._settings().model

    @property
    def dimensions(self) -> int:
        return self._cache.dimensions

    @property
    def cache(self) -> VectorCache:
        return self._cache

    @property
    def composer(self) -> TextComposer:
        return self._composer

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        """Embed one text.  Raises ConfigurationError or ProviderError."""
        provider = await self._require_provider()
        vector = await provider.embed(text)
        self._check_vectors([vector], expected=1)
        return vector

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts*, returning vectors in input order."""
        if not texts:
            return []
        provider = await self._require_provider()
        vectors = await provider.embed_batch(texts)
        self._check_vectors(vectors, expected=len(texts))
        return vectors

    async def embed_if_configured(self, event_id: str) -> bool:
        """Embed one event and update the cache in place.

        No-op when unconfigured or when the event composes to empty text.
        Failures are logged and swallowed.  Returns True if an embedding
        was written.
        """
        try:
            if not self.is_configured():
                return False
            text = await self._composer.compose(event_id)
            if not text:
                logger.debug("No embeddable text for event %s", event_id)
                return False
            vector = await self.embed(text)
            await self._store.upsert_embedding(event_id, vector, self.model_name)
            self._cache.put(event_id, vector)
        except Exception:
            logger.warning("Failed to embed event %s", event_id, exc_info=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query_vector: Sequence[float] | np.ndarray,
        limit: int = 20,
    ) -> list[SearchHit]:
        """Rank every cached vector against *query_vector*; return the top *limit*."""
        entries = await self._cache.get()
        return rank(query_vector, entries, limit)

    async def search_text(self, query: str, limit: int = 20) -> list[SearchHit]:
        """Embed *query* and search with the resulting vector."""
        vector = await self.embed(query)
        return await self.search(vector, limit)

    def invalidate_cache(self) -> None:
        """Discard the vector cache; the next search reloads it from the store."""
        self._cache.invalidate()

    async def embedding_count(self) -> int:
        if isinstance(self._store, SupportsEmbeddingMaintenance):
            return await self._store.get_embedding_count()
        return len(await self._store.get_all_embeddings())

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    async def rebuild(self) -> RebuildResult:
        """Embed every event that has no embedding yet.

        Runs in batches of *batch_size* events.  Events that compose to
        empty text are skipped.  When a batch fails at the provider or
        while writing, its unwritten events are counted in ``errors`` and
        the run moves on; embeddings already written stay written.  The
        cache is invalidated at the end regardless.

        An unconfigured provider fails every batch; check
        :meth:`is_configured` first.
        """
        unembedded = await self._store.get_unembedded_event_ids()
        total = len(unembedded)
        embedded = 0
        errors = 0

        try:
            for start in range(0, total, self._batch_size):
                batch_ids = unembedded[start : start + self._batch_size]

                pairs: list[tuple[str, str]] = []
                for event_id in batch_ids:
                    text = await self._composer.compose(event_id)
                    if text:
                        pairs.append((event_id, text))
                if not pairs:
                    continue

                persisted = 0
                try:
                    vectors = await self.embed_batch([text for _, text in pairs])
                    model = self.model_name
                    for (event_id, _), vector in zip(pairs, vectors, strict=True):
                        await self._store.upsert_embedding(event_id, vector, model)
                        persisted += 1
                except Exception:
                    logger.warning(
                        "Embedding batch of %d events failed after %d writes",
                        len(pairs),
                        persisted,
                        exc_info=True,
                    )
                    errors += len(pairs) - persisted
                embedded += persisted
        finally:
            self._cache.invalidate()

        logger.info("Rebuild finished: total=%d embedded=%d errors=%d", total, embedded, errors)
        return RebuildResult(total=total, embedded=embedded, errors=errors)

    async def reindex_all(self) -> RebuildResult:
        """Delete every embedding, then rebuild from scratch."""
        if not isinstance(self._store, SupportsEmbeddingMaintenance):
            msg = "Store does not support deleting embeddings"
            raise TypeError(msg)
        await self._store.delete_all_embeddings()
        self._cache.invalidate()
        return await self.rebuild()

    # ------------------------------------------------------------------
    # Event bus
    # ------------------------------------------------------------------

    def attach(self, bus: EventBus) -> None:
        """Embed events as they are recorded or updated."""
        bus.register(ChangeType.EVENT_RECORDED, self._on_event_changed)
        bus.register(ChangeType.EVENT_UPDATED, self._on_event_changed)

    def detach(self, bus: EventBus) -> None:
        bus.unregister(ChangeType.EVENT_RECORDED, self._on_event_changed)
        bus.unregister(ChangeType.EVENT_UPDATED, self._on_event_changed)

    async def _on_event_changed(self, change: EventChange) -> None:
        await self.embed_if_configured(change.event_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release the provider's HTTP client, if this index created one."""
        if self._provider is not None:
            await self._provider.close()
            self._provider = None
            self._provider_key = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _settings(self) -> EmbeddingSettings:
        if self._fixed_settings is not None:
            return self._fixed_settings
        return EmbeddingSettings.resolve(self._config_path)

    async def _require_provider(self) -> EmbeddingProvider:
        """Return the active provider, raising ConfigurationError when there is none."""
        if self._injected_provider is not None:
            return self._injected_provider

        settings = self._settings()
        if not settings.is_configured:
            msg = "OpenAI API key not configured. Set openaiApiKey in the AI settings file."
            raise ConfigurationError(msg)
        if self._provider is None or self._provider_key != settings.api_key:
            stale = self._provider
            self._provider = OpenAIEmbedding.from_settings(settings)
            self._provider_key = settings.api_key
            if stale is not None:
                await stale.close()
        return self._provider

    def _check_vectors(self, vectors: list[list[float]], *, expected: int) -> None:
        if len(vectors) != expected:
            msg = f"expected {expected} embeddings, got {len(vectors)}"
            raise ProviderError(None, msg)
        dims = self._cache.dimensions
        for vector in vectors:
            if len(vector) != dims:
                msg = f"expected {dims}-dimension embeddings, got {len(vector)}"
                raise ProviderError(None, msg)
