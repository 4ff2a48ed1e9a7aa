"""
Embedding Providers
===================

Turn a free-text query into a dense vector.

Two backends:
- OpenAIEmbeddingProvider: hosted embeddings API over httpx
- OllamaEmbeddingProvider: local model through LangChain's OllamaEmbeddings

Both raise EmbeddingError for empty input, unreachable providers and
malformed or empty responses.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx
from langchain_ollama import OllamaEmbeddings

from product_search.config.settings import Settings, get_settings
from product_search.utils.errors import ConfigurationError, EmbeddingError
from product_search.utils.logger import get_logger

logger = get_logger(__name__)


class EmbeddingProvider(ABC):
    """Converts text into a fixed-length embedding vector."""

    model_name: str

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Raises:
            EmbeddingError: If the text is empty or the provider fails
        """

    async def aclose(self) -> None:
        """Release network resources held by the provider."""

    @staticmethod
    def _require_text(text: str) -> str:
        if not text or not text.strip():
            raise EmbeddingError(
                message="Cannot embed empty text",
                details={"text": text},
            )
        return text.strip()

    def _check_dimensions(self, embedding: list[float], expected: int | None) -> None:
        if not embedding:
            raise EmbeddingError(
                message="No embedding data received",
                details={"model": self.model_name},
            )
        if expected is not None and len(embedding) != expected:
            raise EmbeddingError(
                message=f"Unexpected embedding dimensions: {len(embedding)}",
                details={"expected": expected, "actual": len(embedding)},
            )


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """
    Embeddings from the OpenAI ``/embeddings`` endpoint.

    Usage:
        provider = OpenAIEmbeddingProvider(api_key="sk-...")
        vector = await provider.embed("bamboo cutting board")
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        dimensions: int | None = None,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            api_key: OpenAI API key
            model: Embedding model name
            base_url: API base URL
            dimensions: Expected vector length (not checked when None)
            timeout: Request timeout in seconds
            client: Pre-built httpx client, mainly for tests

        Raises:
            ConfigurationError: If no API key is given
        """
        if not api_key:
            raise ConfigurationError(
                message="OPENAI_API_KEY is required for the openai embedding provider",
            )
        self.model_name = model
        self._dimensions = dimensions
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
        )
        self._owns_client = client is None
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def embed(self, text: str) -> list[float]:
        text = self._require_text(text)

        try:
            response = await self._client.post(
                "/embeddings",
                headers=self._headers,
                json={"input": text, "model": self.model_name},
            )
        except httpx.HTTPError as e:
            logger.error("Embedding request failed", error=str(e), model=self.model_name)
            raise EmbeddingError(
                message=f"Failed to generate embeddings: {e}",
                details={"model": self.model_name},
            ) from e

        if response.status_code >= 400:
            raise EmbeddingError(
                message=(
                    f"Failed to generate embeddings: OpenAI API error: "
                    f"{response.status_code} {response.reason_phrase}"
                ),
                details={"status_code": response.status_code, "body": response.text[:500]},
            )

        embedding = self._parse(response)
        self._check_dimensions(embedding, self._dimensions)
        logger.debug("Embedding generated", dimensions=len(embedding), model=self.model_name)
        return embedding

    def _parse(self, response: httpx.Response) -> list[float]:
        try:
            payload: dict[str, Any] = response.json()
            data = payload.get("data") or []
            return [float(x) for x in data[0]["embedding"]] if data else []
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise EmbeddingError(
                message="Failed to generate embeddings: malformed response",
                details={"error": str(e)},
            ) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class OllamaEmbeddingProvider(EmbeddingProvider):
    """
    Embeddings from a local Ollama model via LangChain.

    Architecture:
        OllamaEmbeddingProvider -> OllamaEmbeddings (LangChain) -> Ollama API
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        dimensions: int | None = None,
    ) -> None:
        self.model_name = model
        self._dimensions = dimensions
        self._embeddings = OllamaEmbeddings(model=model, base_url=base_url)

        logger.debug(
            "OllamaEmbeddingProvider initialized",
            model=model,
            dimensions=dimensions,
            ollama_url=base_url,
        )

    async def embed(self, text: str) -> list[float]:
        text = self._require_text(text)

        try:
            embeddings = await self._embeddings.aembed_documents([text])
        except Exception as e:
            logger.error(
                "Embedding generation failed",
                error=str(e),
                text_preview=text[:50],
            )
            raise EmbeddingError(
                message="Failed to generate embedding",
                details={"error": str(e), "text_preview": text[:50]},
            ) from e

        embedding = embeddings[0] if embeddings else []
        self._check_dimensions(embedding, self._dimensions)
        return embedding


def create_embedding_provider(settings: Settings | None = None) -> EmbeddingProvider:
    """
    Build the embedding provider selected in settings.

    Raises:
        ConfigurationError: If the selected provider is misconfigured
    """
    settings = settings or get_settings()

    if settings.embedding_provider == "ollama":
        return OllamaEmbeddingProvider(
            model=settings.ollama_embedding_model,
            base_url=settings.ollama_base_url,
            dimensions=settings.embedding_dimensions,
        )

    return OpenAIEmbeddingProvider(
        api_key=settings.openai_api_key,
        model=settings.openai_embedding_model,
        base_url=settings.openai_base_url,
        dimensions=settings.embedding_dimensions,
        timeout=settings.embedding_timeout_seconds,
    )
