"""
Pydantic Response Models
========================

API response schemas for product-search endpoints.
Ensures consistent response structure across all endpoints.
"""

from typing import Annotated, Any

from pydantic import BaseModel, Field

from product_search.schemas.domain import ResultRow


class SearchResponse(BaseModel):
    """
    Response for POST /search/products.

    Attributes:
        results: Product cards in final order
        count: Number of rows returned
        page: Requested page
        limit: Requested page size
        reranked: Whether the rerank step was requested
    """

    results: list[ResultRow]
    count: Annotated[int, Field(ge=0)]
    page: int
    limit: int
    reranked: bool = False


class ErrorResponse(BaseModel):
    """Error body returned for failed requests."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class HealthCheckResponse(BaseModel):
    """Response for GET /health."""

    status: str
    version: str
    service: str
    checks: dict[str, Any] = Field(default_factory=dict)
