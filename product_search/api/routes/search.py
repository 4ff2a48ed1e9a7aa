"""
Search Routes
=============

API endpoint for semantic product search.

Endpoints:
- POST /search/products - Search products by text with filters

Failures returned by the engine are mapped to HTTP status codes:
validation -> 422, timeout -> 504, everything else -> 502.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from product_search.schemas.requests import SearchRequest
from product_search.schemas.responses import ErrorResponse, SearchResponse
from product_search.schemas.result import Err, SearchFailure
from product_search.search.engine import VectorSearchEngine, get_search_engine
from product_search.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

FAILURE_STATUS = {
    "validation": 422,
    "timeout": status.HTTP_504_GATEWAY_TIMEOUT,
}


def failure_response(failure: SearchFailure) -> JSONResponse:
    """Render a SearchFailure as an ErrorResponse body."""
    status_code = FAILURE_STATUS.get(failure.error_type, status.HTTP_502_BAD_GATEWAY)
    body = ErrorResponse(
        error=failure.error_type,
        message=failure.message,
        details=failure.details,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post(
    "/products",
    response_model=SearchResponse,
    status_code=status.HTTP_200_OK,
    summary="Search products",
    description=(
        "Embed the query text and return the closest products, one card per "
        "product, ordered by rank score. Supports price, MOQ, lead time and "
        "label filters, pagination and optional reranking."
    ),
    responses={
        200: {"description": "Search results"},
        422: {"model": ErrorResponse, "description": "Invalid request or empty query"},
        502: {"model": ErrorResponse, "description": "Embedding, database or rerank failure"},
        504: {"model": ErrorResponse, "description": "Search deadline exceeded"},
    },
)
async def search_products(
    request: SearchRequest,
    engine: Annotated[VectorSearchEngine, Depends(get_search_engine)],
) -> SearchResponse | JSONResponse:
    """
    Search products.

    Args:
        request: Query text, filters and pagination
        engine: Search engine dependency

    Returns:
        SearchResponse on success, ErrorResponse body otherwise
    """
    logger.info(
        "Product search requested",
        page=request.page,
        limit=request.limit,
        rerank=request.rerank,
        label_keys=len(request.product_label_keys),
    )

    outcome = await engine.search(request)

    if isinstance(outcome, Err):
        return failure_response(outcome.error)

    return SearchResponse(
        results=outcome.value,
        count=len(outcome.value),
        page=request.page,
        limit=request.limit,
        reranked=request.rerank,
    )
