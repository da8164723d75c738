"""Embedding provider implementations."""

from memex.search.providers.openai import OpenAIEmbedding

__all__ = ["OpenAIEmbedding"]
