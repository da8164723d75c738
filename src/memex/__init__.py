"""memex: semantic memory index for personal life events.

Composes text for events, embeds it, caches the vectors and answers
nearest-neighbour queries.
"""

__version__ = "0.1.0"

from memex.config import AIConfig, EmbeddingSettings, load_ai_config, save_ai_config
from memex.events import ChangeType, EventBus, EventChange
from memex.exceptions import ConfigurationError, MemexError, ProviderError, StorageError
from memex.search import (
    CacheState,
    EmbeddingProvider,
    MemoryIndex,
    OpenAIEmbedding,
    RebuildResult,
    SearchHit,
    TextComposer,
    VectorCache,
    cosine_similarity,
)
from memex.store import DatabaseEventStore, EventStore

__all__ = [
    "AIConfig",
    "CacheState",
    "ChangeType",
    "ConfigurationError",
    "DatabaseEventStore",
    "EmbeddingProvider",
    "EmbeddingSettings",
    "EventBus",
    "EventChange",
    "EventStore",
    "MemexError",
    "MemoryIndex",
    "OpenAIEmbedding",
    "ProviderError",
    "RebuildResult",
    "SearchHit",
    "StorageError",
    "TextComposer",
    "VectorCache",
    "__version__",
    "cosine_similarity",
    "load_ai_config",
    "save_ai_config",
]
