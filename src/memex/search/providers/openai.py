"""OpenAIEmbedding: async embedding provider backed by OpenAI's API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import openai
from openai import AsyncOpenAI

from memex.config import EmbeddingSettings
from memex.exceptions import ConfigurationError, ProviderError

if TYPE_CHECKING:
    from openai.types import CreateEmbeddingResponse

logger = logging.getLogger(__name__)


class OpenAIEmbedding:
    """Async embedding provider backed by the OpenAI Embeddings API.

    Every input is truncated to *max_input_chars* before submission.
    Batches larger than *batch_size* are sent as sequential sub-batches
    and the results concatenated in input order.  A failed sub-batch
    raises :class:`ProviderError`; sub-batches that already completed
    are not rolled back.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "text-embedding-3-small",
        dimensions: int = 384,
        batch_size: int = 100,
        max_input_chars: int = 8000,
        max_retries: int = 2,
        timeout: float = 60.0,
    ) -> None:
        if not api_key:
            msg = "OpenAI API key not configured. Set openaiApiKey in the AI settings file."
            raise ConfigurationError(msg)
        if batch_size < 1:
            msg = f"batch_size must be positive, got {batch_size}"
            raise ValueError(msg)

        self._model = model
        self._dimensions = dimensions
        self._batch_size = batch_size
        self._max_input_chars = max_input_chars
        self._client = AsyncOpenAI(
            api_key=api_key,
            max_retries=max_retries,
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: EmbeddingSettings) -> OpenAIEmbedding:
        """Build a provider from resolved :class:`EmbeddingSettings`."""
        return cls(
            api_key=settings.api_key,
            model=settings.model,
            dimensions=settings.dimensions,
            batch_size=settings.batch_size,
            max_input_chars=settings.max_input_chars,
            max_retries=settings.max_retries,
            timeout=settings.timeout,
        )

    # ------------------------------------------------------------------
    # EmbeddingProvider protocol
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        """Embed a single text string via the OpenAI API."""
        result = await self._call_api([text])
        return result[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed multiple texts, chunking at *batch_size* per API call."""
        if not texts:
            return []

        all_vectors: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            chunk = texts[start : start + self._batch_size]
            vectors = await self._call_api(chunk)
            all_vectors.extend(vectors)
        return all_vectors

    @property
    def dimensions(self) -> int:
        """Return the embedding dimensionality."""
        return self._dimensions

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model

    @property
    def batch_size(self) -> int:
        return self._batch_size

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._client.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _call_api(self, texts: list[str]) -> list[list[float]]:
        """Call the OpenAI embeddings endpoint and return ordered vectors."""
        kwargs: dict[str, Any] = {
            "input": [t[: self._max_input_chars] for t in texts],
            "model": self._model,
            "dimensions": self._dimensions,
        }

        try:
            response: CreateEmbeddingResponse = await self._client.embeddings.create(**kwargs)
        except openai.APIStatusError as exc:
            raise ProviderError(exc.status_code, exc.response.text) from exc
        except openai.APIConnectionError as exc:
            raise ProviderError(None, str(exc)) from exc
        except openai.APIError as exc:
            raise ProviderError(None, str(exc)) from exc

        if len(response.data) != len(texts):
            msg = f"expected {len(texts)} embeddings, got {len(response.data)}"
            raise ProviderError(None, msg)

        # The API does not promise response order; sort by index to match input
        sorted_data = sorted(response.data, key=lambda e: e.index)
        logger.debug("Embedded %d texts with %s", len(texts), self._model)
        return [item.embedding for item in sorted_data]
