"""
Vector Search Engine
====================

Public entry point of the product search pipeline:

    query text -> embedding -> filtered pgvector search -> optional rerank

Every outcome is returned as a value (``Ok`` with the result rows or
``Err`` with a SearchFailure); the engine does not raise for expected
failures. Cancellation of the calling task is propagated unchanged.
"""

import asyncio
import time
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncConnection

from product_search.config.settings import Settings, get_settings
from product_search.db.connection import DatabaseManager
from product_search.db.repositories.product_vector_repo import (
    ProductVectorRepository,
    ef_search_for,
)
from product_search.metrics import SEARCH_LATENCY, record_search
from product_search.schemas.domain import ResultRow
from product_search.schemas.requests import SearchRequest
from product_search.schemas.result import Err, Ok, SearchFailure
from product_search.search.conditions import QueryConditionBuilder, SearchConditions
from product_search.search.ranking import collapse_variants
from product_search.search.rerank import RerankOrchestrator
from product_search.services.embedding import EmbeddingProvider, create_embedding_provider
from product_search.services.reranker import PassthroughReranker, Reranker, create_reranker
from product_search.utils.errors import (
    DatabaseError,
    ProductSearchError,
    SearchTimeoutError,
    ValidationError,
)
from product_search.utils.logger import get_logger, log_query_error

logger = get_logger(__name__)

COMPONENT = "vectorSearch"

NO_QUERY_MESSAGE = "No query provided"

ConnectionFactory = Callable[[], AbstractAsyncContextManager[AsyncConnection]]

_USE_SETTINGS = object()


class VectorSearchEngine:
    """
    Semantic product search over pgvector.

    Each search checks out exactly one pooled connection and runs the
    ``hnsw.ef_search`` setting and the search statement on it inside one
    transaction, so concurrent searches never see each other's setting.

    Example:
        engine = VectorSearchEngine(embedder=create_embedding_provider())
        outcome = await engine.search(SearchRequest(query="steel water bottle"))
        if isinstance(outcome, Ok):
            for row in outcome.value:
                print(row.product, row.price)
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        reranker: Reranker | None = None,
        connect: ConnectionFactory | None = None,
        settings: Settings | None = None,
        candidate_table: str = "public.product_embeddings",
        store_table: str = "public.product_vector_store",
        label_table: str = "public.product_labels",
    ) -> None:
        """
        Initialize the engine.

        Args:
            embedder: Query embedding provider
            reranker: Optional cross-encoder (passthrough when omitted)
            connect: Factory for a transactional connection context
                (defaults to ``DatabaseManager.connection``)
            settings: Application settings
            candidate_table: Product-level embedding table
            store_table: Variant-level embedding table
            label_table: Product label table
        """
        settings = settings or get_settings()

        self._embedder = embedder
        self._reranker = reranker or PassthroughReranker()
        self._rerank = RerankOrchestrator(self._reranker)
        self._connect = connect or DatabaseManager.connection
        self._conditions = QueryConditionBuilder()
        self._ef_search_floor = settings.hnsw_ef_search_floor
        self._model_tag = settings.vector_model_tag
        self._timeout = settings.search_timeout_seconds
        self._tables = {
            "candidate_table": candidate_table,
            "store_table": store_table,
            "label_table": label_table,
        }

    async def search(
        self,
        request: SearchRequest,
        timeout: float | None | object = _USE_SETTINGS,
    ) -> Ok[list[ResultRow]] | Err[SearchFailure]:
        """
        Run one product search.

        Args:
            request: Query text, filters, pagination and rerank flag
            timeout: Deadline in seconds for the whole search; ``None``
                disables it, omitted uses ``search_timeout_seconds``

        Returns:
            Ok with at most ``request.limit`` rows, one per product, or Err
            describing why the search failed
        """
        start = time.perf_counter()

        query = request.query.strip()
        if not query:
            record_search("validation", time.perf_counter() - start)
            return self._failure(ValidationError(message=NO_QUERY_MESSAGE))

        deadline = self._timeout if timeout is _USE_SETTINGS else timeout

        try:
            async with asyncio.timeout(deadline):
                outcome = await self._run(query, request)
        except ProductSearchError as e:
            outcome = self._failure(e)
        except TimeoutError:
            outcome = self._failure(
                SearchTimeoutError(
                    message=f"Search timed out after {deadline}s",
                    details={"timeout_seconds": deadline},
                )
            )
        except Exception as e:
            logger.exception("Unexpected search error", error=str(e))
            outcome = Err(
                SearchFailure(
                    message=f"Unexpected search error: {e}",
                    error_type="internal",
                    details={"error_class": type(e).__name__},
                )
            )

        duration = time.perf_counter() - start
        if isinstance(outcome, Ok):
            record_search("success", duration, len(outcome.value))
            logger.info(
                "Search completed",
                results=len(outcome.value),
                page=request.page,
                limit=request.limit,
                reranked=request.rerank,
                duration_ms=round(duration * 1000, 2),
            )
        else:
            record_search(outcome.error.error_type, duration)

        return outcome

    async def _run(
        self, query: str, request: SearchRequest
    ) -> Ok[list[ResultRow]] | Err[SearchFailure]:
        with SEARCH_LATENCY.labels(phase="embedding").time():
            embedding = await self._embedder.embed(query)

        conditions = self._conditions.build(request)
        ef_search = ef_search_for(request.limit, self._ef_search_floor)

        with SEARCH_LATENCY.labels(phase="query").time():
            rows = await self._query(embedding, conditions, ef_search, request)

        rows = collapse_variants(rows)

        return await self._rerank.apply(
            request.query, rows, request.limit, enabled=request.rerank
        )

    async def _query(
        self,
        embedding: list[float],
        conditions: SearchConditions,
        ef_search: int,
        request: SearchRequest,
    ) -> list[ResultRow]:
        """Set recall and run the search on one checked-out connection."""
        try:
            async with self._connect() as conn:
                repo = ProductVectorRepository(conn, model_tag=self._model_tag, **self._tables)
                await repo.set_ef_search(ef_search)
                return await repo.search_similar_products(
                    embedding,
                    conditions,
                    limit=request.limit,
                    offset=request.offset,
                )
        except ProductSearchError:
            raise
        except Exception as e:
            log_query_error(COMPONENT, "connection", str(e))
            raise DatabaseError(
                message=f"Database connection failed: {e}",
                details={"error_class": type(e).__name__},
            ) from e

    def _failure(self, exc: ProductSearchError) -> Err[SearchFailure]:
        log_query_error(COMPONENT, "search", exc.message, error_type=exc.error_type)
        return Err(SearchFailure.from_exception(exc))

    async def aclose(self) -> None:
        """Release HTTP clients held by the embedder and reranker."""
        await self._embedder.aclose()
        await self._reranker.aclose()


@lru_cache
def get_search_engine() -> VectorSearchEngine:
    """
    Get the process-wide search engine.

    Used as a FastAPI dependency; tests override it through
    ``app.dependency_overrides``.
    """
    settings = get_settings()
    return VectorSearchEngine(
        embedder=create_embedding_provider(settings),
        reranker=create_reranker(settings),
        settings=settings,
    )
