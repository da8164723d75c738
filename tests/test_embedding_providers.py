"""Tests for the OpenAI embedding provider."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from memex.config import EmbeddingSettings
from memex.exceptions import ConfigurationError, ProviderError
from memex.search.protocols import EmbeddingProvider
from memex.search.providers.openai import OpenAIEmbedding

_URL = "https://api.openai.com/v1/embeddings"


def _mock_response(vectors: list[list[float]], indices: list[int] | None = None):
    """Build a mock CreateEmbeddingResponse."""
    mock_resp = MagicMock()
    mock_data = []
    for i, vec in enumerate(vectors):
        item = MagicMock()
        item.embedding = vec
        item.index = indices[i] if indices is not None else i
        mock_data.append(item)
    mock_resp.data = mock_data
    return mock_resp


class TestOpenAIEmbedding:
    def _make_provider(self, **kwargs) -> OpenAIEmbedding:
        return OpenAIEmbedding(api_key="sk-test-key", **kwargs)

    @pytest.mark.asyncio
    async def test_embed_single_text(self):
        provider = self._make_provider()
        expected = [0.1, 0.2, 0.3]
        provider._client.embeddings.create = AsyncMock(return_value=_mock_response([expected]))

        result = await provider.embed("hello")

        assert result == expected
        call_kwargs = provider._client.embeddings.create.call_args[1]
        assert call_kwargs["input"] == ["hello"]
        assert call_kwargs["model"] == "text-embedding-3-small"
        assert call_kwargs["dimensions"] == 384

    @pytest.mark.asyncio
    async def test_embed_batch_empty(self):
        provider = self._make_provider()
        provider._client.embeddings.create = AsyncMock()
        assert await provider.embed_batch([]) == []
        provider._client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_inputs_truncated(self):
        provider = self._make_provider()
        provider._client.embeddings.create = AsyncMock(
            return_value=_mock_response([[0.0], [1.0]])
        )

        await provider.embed_batch(["x" * 9000, "short"])

        sent = provider._client.embeddings.create.call_args[1]["input"]
        assert len(sent[0]) == 8000
        assert sent[1] == "short"

    @pytest.mark.asyncio
    async def test_response_sorted_by_index(self):
        """Vectors come back in input order even if the API shuffles them."""
        provider = self._make_provider()
        provider._client.embeddings.create = AsyncMock(
            return_value=_mock_response([[2.0], [0.0], [1.0]], indices=[2, 0, 1])
        )

        result = await provider.embed_batch(["a", "b", "c"])

        assert result == [[0.0], [1.0], [2.0]]

    @pytest.mark.asyncio
    async def test_250_texts_take_three_calls(self):
        provider = self._make_provider()
        sizes: list[int] = []

        async def mock_create(**kwargs):
            texts = kwargs["input"]
            sizes.append(len(texts))
            # Reverse the response order to exercise the re-sort
            n = len(texts)
            vecs = [[float(t)] for t in reversed(texts)]
            return _mock_response(vecs, indices=list(range(n - 1, -1, -1)))

        provider._client.embeddings.create = mock_create

        texts = [str(i) for i in range(250)]
        result = await provider.embed_batch(texts)

        assert sizes == [100, 100, 50]
        assert result == [[float(i)] for i in range(250)]

    @pytest.mark.asyncio
    async def test_status_error_raises_provider_error(self):
        provider = self._make_provider()
        response = httpx.Response(429, text="rate limited", request=httpx.Request("POST", _URL))
        provider._client.embeddings.create = AsyncMock(
            side_effect=openai.APIStatusError("rate limited", response=response, body=None)
        )

        with pytest.raises(ProviderError) as exc_info:
            await provider.embed("hello")

        assert exc_info.value.status == 429
        assert exc_info.value.body == "rate limited"
        assert "429" in str(exc_info.value)
        assert "rate limited" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error_raises_provider_error(self):
        provider = self._make_provider()
        provider._client.embeddings.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=httpx.Request("POST", _URL))
        )

        with pytest.raises(ProviderError) as exc_info:
            await provider.embed("hello")

        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_response_validation_error_raises_provider_error(self):
        provider = self._make_provider()
        response = httpx.Response(200, text="<html>", request=httpx.Request("POST", _URL))
        provider._client.embeddings.create = AsyncMock(
            side_effect=openai.APIResponseValidationError(response=response, body=None)
        )

        with pytest.raises(ProviderError) as exc_info:
            await provider.embed("hello")

        assert exc_info.value.status is None
        assert isinstance(exc_info.value.__cause__, openai.APIResponseValidationError)

    @pytest.mark.asyncio
    async def test_failed_sub_batch_aborts_after_earlier_ones(self):
        provider = self._make_provider(batch_size=2)
        calls = 0

        async def mock_create(**kwargs):
            nonlocal calls
            calls += 1
            if calls == 2:
                response = httpx.Response(500, text="boom", request=httpx.Request("POST", _URL))
                raise openai.APIStatusError("boom", response=response, body=None)
            return _mock_response([[0.0]] * len(kwargs["input"]))

        provider._client.embeddings.create = mock_create

        with pytest.raises(ProviderError):
            await provider.embed_batch(["a", "b", "c", "d", "e"])
        assert calls == 2

    @pytest.mark.asyncio
    async def test_short_response_raises(self):
        provider = self._make_provider()
        provider._client.embeddings.create = AsyncMock(return_value=_mock_response([[0.0]]))

        with pytest.raises(ProviderError, match="expected 2 embeddings"):
            await provider.embed_batch(["a", "b"])

    def test_api_key_required(self):
        with pytest.raises(ConfigurationError, match="not configured"):
            OpenAIEmbedding(api_key=None)

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError, match="batch_size"):
            self._make_provider(batch_size=0)

    def test_from_settings(self):
        settings = EmbeddingSettings(api_key="sk-x", model="m", dimensions=16, batch_size=7)
        provider = OpenAIEmbedding.from_settings(settings)
        assert provider.model_name == "m"
        assert provider.dimensions == 16
        assert provider.batch_size == 7

    def test_from_unconfigured_settings(self):
        with pytest.raises(ConfigurationError):
            OpenAIEmbedding.from_settings(EmbeddingSettings())

    def test_isinstance_embedding_provider(self):
        assert isinstance(self._make_provider(), EmbeddingProvider)

    @pytest.mark.asyncio
    async def test_close(self):
        provider = self._make_provider()
        provider._client.close = AsyncMock()
        await provider.close()
        provider._client.close.assert_called_once()
