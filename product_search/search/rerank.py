"""
Rerank Orchestrator
===================

Optional second-stage reordering of search results.

Failure handling is asymmetric:
- the reranker answers with a RerankFailure -> the whole search fails
  with that message
- the rerank call raises (network error, timeout, bad payload) -> the
  error is logged and the pre-rerank order is returned unchanged
"""

from product_search.metrics import SEARCH_LATENCY, record_rerank_fallback
from product_search.schemas.domain import RerankFailure, ResultRow
from product_search.schemas.result import Err, Ok, SearchFailure
from product_search.services.reranker import Reranker
from product_search.utils.logger import get_logger

logger = get_logger(__name__)


class RerankOrchestrator:
    """
    Applies a Reranker to an ordered result list.

    Example:
        orchestrator = RerankOrchestrator(CohereReranker(api_key="..."))
        outcome = await orchestrator.apply("usb-c cable", rows, limit=20, enabled=True)
    """

    def __init__(self, reranker: Reranker) -> None:
        self._reranker = reranker

    async def apply(
        self,
        query: str,
        rows: list[ResultRow],
        limit: int,
        enabled: bool = True,
    ) -> Ok[list[ResultRow]] | Err[SearchFailure]:
        """
        Reorder ``rows`` by cross-encoder relevance.

        Rows the reranker does not return (e.g. outside its top-k) are
        dropped.

        Args:
            query: Original query text
            rows: Ranked rows from the vector search
            limit: Number of results the reranker may return
            enabled: Pass rows through untouched when False

        Returns:
            Ok with the reordered rows, or Err when the reranker reported
            an explicit failure
        """
        if not enabled or not rows:
            return Ok(rows)

        documents = [row.product for row in rows]

        try:
            with SEARCH_LATENCY.labels(phase="rerank").time():
                outcome = await self._reranker.rerank(query, documents, limit)
        except Exception as e:
            logger.warning(
                "Reranking failed, returning original response",
                error=str(e),
                error_type=type(e).__name__,
            )
            record_rerank_fallback(type(e).__name__)
            return Ok(rows)

        if isinstance(outcome, RerankFailure):
            logger.error("Rerank service reported failure", message=outcome.message)
            return Err(
                SearchFailure(
                    message=outcome.message,
                    error_type="rerank",
                    details={"status_code": outcome.status_code},
                )
            )

        reordered: list[ResultRow] = []
        seen: set[int] = set()
        for hit in outcome:
            if hit.index >= len(rows) or hit.index in seen:
                continue
            seen.add(hit.index)
            reordered.append(rows[hit.index])

        logger.debug(
            "Results reranked",
            input_count=len(rows),
            output_count=len(reordered),
        )
        return Ok(reordered)
