"""Semantic search layer: composer, provider, cache, ranking and the index facade."""

from memex.search._index import MemoryIndex
from memex.search.cache import CacheState, VectorCache
from memex.search.composer import TextComposer, parse_photo_tags, temporal_clause
from memex.search.protocols import EmbeddingProvider
from memex.search.providers.openai import OpenAIEmbedding
from memex.search.similarity import cosine_similarity, rank
from memex.search.types import PhotoTags, RebuildResult, SearchHit, StoredEmbedding

__all__ = [
    "CacheState",
    "EmbeddingProvider",
    "MemoryIndex",
    "OpenAIEmbedding",
    "PhotoTags",
    "RebuildResult",
    "SearchHit",
    "StoredEmbedding",
    "TextComposer",
    "VectorCache",
    "cosine_similarity",
    "parse_photo_tags",
    "rank",
    "temporal_clause",
]
