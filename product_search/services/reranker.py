"""
Rerank Services
===============

Cross-encoder reranking of a small candidate list.

``rerank`` returns either a list of RerankHit (positions into the input
documents, best first) or a RerankFailure when the service answered with
an error. Transport problems (connection errors, timeouts, unreadable
responses) are raised as httpx / RerankError exceptions.
"""

from abc import ABC, abstractmethod

import httpx

from product_search.config.settings import Settings, get_settings
from product_search.schemas.domain import RerankFailure, RerankHit
from product_search.utils.errors import RerankError
from product_search.utils.logger import get_logger

logger = get_logger(__name__)


class Reranker(ABC):
    @abstractmethod
    async def rerank(
        self, query: str, documents: list[str], top_k: int
    ) -> list[RerankHit] | RerankFailure:
        pass

    async def aclose(self) -> None:
        pass


class PassthroughReranker(Reranker):
    """Keeps the original order, truncated to ``top_k``."""

    async def rerank(
        self, query: str, documents: list[str], top_k: int
    ) -> list[RerankHit] | RerankFailure:
        return [RerankHit(index=i) for i in range(min(top_k, len(documents)))]


class CohereReranker(Reranker):
    """
    Reranking through the Cohere ``/rerank`` endpoint.

    Usage:
        reranker = CohereReranker(api_key="...")
        hits = await reranker.rerank("usb-c cable", names, top_k=20)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "rerank-english-v3.0",
        base_url: str = "https://api.cohere.ai/v1",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model = model
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def rerank(
        self, query: str, documents: list[str], top_k: int
    ) -> list[RerankHit] | RerankFailure:
        if not documents:
            return []

        response = await self._client.post(
            "/rerank",
            headers=self._headers,
            json={
                "query": query,
                "documents": documents,
                "top_n": min(top_k, len(documents)),
                "model": self._model,
            },
        )

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.warning(
                "Rerank service returned an error",
                status_code=response.status_code,
                message=message,
            )
            return RerankFailure(message=message, status_code=response.status_code)

        try:
            results = response.json().get("results") or []
            hits = [RerankHit.model_validate(item) for item in results]
        except (ValueError, AttributeError) as e:
            # pydantic's ValidationError is a ValueError too
            raise RerankError(
                message="Malformed rerank response",
                details={"error": str(e)},
            ) from e

        return [hit for hit in hits if hit.index < len(documents)]

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            message = response.json().get("message")
        except (ValueError, AttributeError):
            message = None
        return message or f"Cohere API error: {response.status_code} {response.reason_phrase}"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def create_reranker(settings: Settings | None = None) -> Reranker:
    """Cohere when an API key is configured, passthrough otherwise."""
    settings = settings or get_settings()

    if not settings.cohere_api_key:
        logger.warning("COHERE_API_KEY not set, reranking keeps the original order")
        return PassthroughReranker()

    return CohereReranker(
        api_key=settings.cohere_api_key,
        model=settings.cohere_rerank_model,
        base_url=settings.cohere_base_url,
        timeout=settings.rerank_timeout_seconds,
    )
