"""
Unit tests for the embedding client (provider mocked).
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.api_core.exceptions import ResourceExhausted

from catalog_search.core.exceptions import RateLimited, ServiceUnavailable
from catalog_search.services.embedding_client import EmbeddingClient, is_rate_limit


def vector(value: float, dimensions: int = 4):
    return [value] * dimensions


@pytest.fixture
def mock_model():
    model = MagicMock()
    model.aembed_documents = AsyncMock()
    model.aembed_query = AsyncMock()
    return model


@pytest.fixture
def client(mock_model):
    return EmbeddingClient(model=mock_model, timeout=1.0, dimensions=4)


class TestEmbed:
    @pytest.mark.asyncio
    async def test_one_vector_per_text_in_order(self, client, mock_model):
        mock_model.aembed_documents.return_value = [vector(0.1), vector(0.2), vector(0.3)]

        result = await client.embed(["a", "b", "c"])

        mock_model.aembed_documents.assert_awaited_once_with(["a", "b", "c"])
        assert [v[0] for v in result] == [0.1, 0.2, 0.3]

    @pytest.mark.asyncio
    async def test_empty_input_skips_provider(self, client, mock_model):
        assert await client.embed([]) == []
        mock_model.aembed_documents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_count_mismatch_fails(self, client, mock_model):
        mock_model.aembed_documents.return_value = [vector(0.1)]

        with pytest.raises(ServiceUnavailable):
            await client.embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_wrong_dimensions_fail(self, client, mock_model):
        mock_model.aembed_documents.return_value = [[0.1, 0.2]]

        with pytest.raises(ServiceUnavailable):
            await client.embed(["a"])


class TestEmbedQuery:
    @pytest.mark.asyncio
    async def test_returns_float_vector(self, client, mock_model):
        mock_model.aembed_query.return_value = [1, 0, 0, 0]

        result = await client.embed_query("kat beeld")

        assert result == [1.0, 0.0, 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_quota_error_is_rate_limited(self, client, mock_model):
        mock_model.aembed_query.side_effect = ResourceExhausted("quota exceeded")

        with pytest.raises(RateLimited):
            await client.embed_query("kat beeld")

    @pytest.mark.asyncio
    async def test_wrapped_quota_error_is_rate_limited(self, client, mock_model):
        mock_model.aembed_query.side_effect = RuntimeError("RESOURCE_EXHAUSTED: quota exceeded")

        with pytest.raises(RateLimited):
            await client.embed_query("kat beeld")

    @pytest.mark.asyncio
    async def test_other_errors_are_unavailable(self, client, mock_model):
        mock_model.aembed_query.side_effect = ConnectionError("connection reset")

        with pytest.raises(ServiceUnavailable):
            await client.embed_query("kat beeld")

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self, mock_model):
        async def slow(text):
            await asyncio.sleep(1)
            return vector(0.1)

        mock_model.aembed_query = slow
        client = EmbeddingClient(model=mock_model, timeout=0.01, dimensions=4)

        with pytest.raises(ServiceUnavailable):
            await client.embed_query("kat beeld")


class ProviderError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class TestRateLimitDetection:
    @pytest.mark.parametrize(
        "error",
        [
            ResourceExhausted("quota exceeded"),
            ProviderError("Too many requests", status_code=429),
            RuntimeError("RESOURCE_EXHAUSTED: quota exceeded"),
        ],
    )
    def test_quota_errors(self, error):
        assert is_rate_limit(error) is True

    def test_wrapped_quota_error(self):
        try:
            try:
                raise ResourceExhausted("quota exceeded")
            except ResourceExhausted as e:
                raise RuntimeError("Error embedding content") from e
        except RuntimeError as wrapped:
            assert is_rate_limit(wrapped) is True

    @pytest.mark.parametrize(
        "error",
        [
            RuntimeError("request 4291 failed"),
            ProviderError("upstream error 429 bytes", status_code=500),
            ConnectionError("connection reset"),
        ],
    )
    def test_digits_in_message_are_not_quota_errors(self, error):
        assert is_rate_limit(error) is False

    @pytest.mark.asyncio
    async def test_request_id_with_429_is_unavailable(self, client, mock_model):
        mock_model.aembed_query.side_effect = RuntimeError("request id 429a1f failed")

        with pytest.raises(ServiceUnavailable):
            await client.embed_query("kat beeld")
