"""
Tests for Embedding Providers
=============================

OpenAI provider exercised over httpx.MockTransport; Ollama provider with
LangChain's OllamaEmbeddings patched out.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from product_search.services.embedding import (
    OllamaEmbeddingProvider,
    OpenAIEmbeddingProvider,
    create_embedding_provider,
)
from product_search.utils.errors import ConfigurationError, EmbeddingError


def openai_provider(handler, dimensions=3):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="https://api.test/v1",
    )
    return OpenAIEmbeddingProvider(
        api_key="sk-test",
        model="text-embedding-3-small",
        dimensions=dimensions,
        client=client,
    )


class TestOpenAIEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_embed_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

        provider = openai_provider(handler)
        result = await provider.embed("  steel bottle ")

        assert result == [0.1, 0.2, 0.3]
        assert seen["path"] == "/v1/embeddings"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"] == {"input": "steel bottle", "model": "text-embedding-3-small"}

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        provider = openai_provider(lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(EmbeddingError) as exc_info:
            await provider.embed("bottle")

        assert "OpenAI API error: 500" in exc_info.value.message
        assert exc_info.value.details["status_code"] == 500

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        provider = openai_provider(handler)

        with pytest.raises(EmbeddingError) as exc_info:
            await provider.embed("bottle")

        assert "Failed to generate embeddings" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_data(self):
        provider = openai_provider(lambda request: httpx.Response(200, json={"data": []}))

        with pytest.raises(EmbeddingError) as exc_info:
            await provider.embed("bottle")

        assert exc_info.value.message == "No embedding data received"

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        provider = openai_provider(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(EmbeddingError):
            await provider.embed("bottle")

    @pytest.mark.asyncio
    async def test_wrong_dimensions(self):
        provider = openai_provider(
            lambda request: httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2]}]})
        )

        with pytest.raises(EmbeddingError) as exc_info:
            await provider.embed("bottle")

        assert "Unexpected embedding dimensions" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_text_makes_no_request(self):
        handler = MagicMock()
        provider = openai_provider(handler)

        with pytest.raises(EmbeddingError) as exc_info:
            await provider.embed("   ")

        assert "Cannot embed empty text" in exc_info.value.message
        handler.assert_not_called()

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError):
            OpenAIEmbeddingProvider(api_key=None)


class TestOllamaEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_embed_success(self):
        with patch("product_search.services.embedding.OllamaEmbeddings") as mock_ollama_class:
            mock_ollama = MagicMock()
            mock_ollama.aembed_documents = AsyncMock(return_value=[[0.1] * 768])
            mock_ollama_class.return_value = mock_ollama

            provider = OllamaEmbeddingProvider(dimensions=768)
            result = await provider.embed("Test product description")

            assert len(result) == 768
            mock_ollama.aembed_documents.assert_called_once_with(["Test product description"])

    @pytest.mark.asyncio
    async def test_ollama_error_wrapped(self):
        with patch("product_search.services.embedding.OllamaEmbeddings") as mock_ollama_class:
            mock_ollama = MagicMock()
            mock_ollama.aembed_documents = AsyncMock(
                side_effect=ConnectionError("Ollama not reachable")
            )
            mock_ollama_class.return_value = mock_ollama

            provider = OllamaEmbeddingProvider(dimensions=768)

            with pytest.raises(EmbeddingError) as exc_info:
                await provider.embed("Test")

            assert "Failed to generate embedding" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_wrong_dimensions(self):
        with patch("product_search.services.embedding.OllamaEmbeddings") as mock_ollama_class:
            mock_ollama = MagicMock()
            mock_ollama.aembed_documents = AsyncMock(return_value=[[0.1] * 512])
            mock_ollama_class.return_value = mock_ollama

            provider = OllamaEmbeddingProvider(dimensions=768)

            with pytest.raises(EmbeddingError) as exc_info:
                await provider.embed("Test")

            assert "Unexpected embedding dimensions" in str(exc_info.value)


class TestCreateEmbeddingProvider:
    def test_openai_by_default(self, settings):
        provider = create_embedding_provider(settings)

        assert isinstance(provider, OpenAIEmbeddingProvider)
        assert provider.model_name == "text-embedding-3-small"

    def test_ollama_selected(self, settings):
        settings = settings.model_copy(update={"embedding_provider": "ollama"})

        with patch("product_search.services.embedding.OllamaEmbeddings"):
            provider = create_embedding_provider(settings)

        assert isinstance(provider, OllamaEmbeddingProvider)
        assert provider.model_name == "nomic-embed-text"

    def test_openai_without_key(self, settings):
        settings = settings.model_copy(update={"openai_api_key": None})

        with pytest.raises(ConfigurationError):
            create_embedding_provider(settings)
