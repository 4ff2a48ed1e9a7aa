"""
Pydantic Request Models
=======================

Request schemas for product similarity search.
All incoming data validated via these models.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PAGE_SIZE = 200


class SearchRequest(BaseModel):
    """
    Product similarity search request.

    Filter bounds are applied independently: a missing bound is never
    defaulted, so ``price_min`` alone filters ``price >= price_min`` only.
    Keeping ``min <= max`` is the caller's responsibility.

    The query is deliberately not length-validated here. An empty or
    whitespace-only query is reported by the search engine as a
    validation failure so that callers always get a result value back.

    Attributes:
        query: Free-text product description
        page: Zero-based page number
        limit: Page size, also the candidate pool size
        price_min: Lower price bound
        price_max: Upper price bound
        moq_min: Lower minimum-order-quantity bound
        moq_max: Upper minimum-order-quantity bound
        lead_time_min: Lower lead time bound in days
        lead_time_max: Upper lead time bound in days
        product_label_keys: Only products carrying one of these labels
        rerank: Reorder results with the cross-encoder reranker
        translated: Only products with a translated title
        categorized: Only products mapped to a taxonomy node
        bot_search: Only variants with the data a quoting bot needs
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "stainless steel insulated water bottle 500ml",
                "page": 0,
                "limit": 20,
                "price_max": "4.50",
                "moq_max": 500,
                "product_label_keys": ["eco_friendly"],
                "rerank": True,
            }
        }
    )

    query: Annotated[str, Field(description="Free-text search query")]
    page: Annotated[int, Field(ge=0, description="Zero-based page")] = 0
    limit: Annotated[
        int,
        Field(gt=0, le=MAX_PAGE_SIZE, description="Maximum rows returned"),
    ] = 20

    price_min: Annotated[Decimal | None, Field(ge=0)] = None
    price_max: Annotated[Decimal | None, Field(ge=0)] = None
    moq_min: Annotated[int | None, Field(ge=0)] = None
    moq_max: Annotated[int | None, Field(ge=0)] = None
    lead_time_min: Annotated[int | None, Field(ge=0)] = None
    lead_time_max: Annotated[int | None, Field(ge=0)] = None

    product_label_keys: Annotated[
        list[str],
        Field(default_factory=list, description="Label keys to filter by"),
    ]

    rerank: bool = False
    translated: bool = False
    categorized: bool = False
    bot_search: bool = False

    @field_validator("product_label_keys", mode="before")
    @classmethod
    def clean_label_keys(cls, value: list[str] | None) -> list[str]:
        """Strip label keys and drop blanks."""
        if value is None:
            return []
        return [key.strip() for key in value if isinstance(key, str) and key.strip()]

    @property
    def offset(self) -> int:
        """Row offset of the requested page."""
        return self.page * self.limit
