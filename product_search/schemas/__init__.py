"""
Schemas Package
===============

Pydantic models for API requests, responses, domain objects,
and the Ok/Err result type.
"""

from product_search.schemas.domain import CandidateRow, RerankFailure, RerankHit, ResultRow
from product_search.schemas.requests import MAX_PAGE_SIZE, SearchRequest
from product_search.schemas.responses import (
    ErrorResponse,
    HealthCheckResponse,
    SearchResponse,
)
from product_search.schemas.result import Err, Ok, SearchFailure

__all__ = [
    # Domain
    "CandidateRow",
    "ResultRow",
    "RerankHit",
    "RerankFailure",
    # Requests
    "SearchRequest",
    "MAX_PAGE_SIZE",
    # Responses
    "SearchResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    # Result
    "Ok",
    "Err",
    "SearchFailure",
]
