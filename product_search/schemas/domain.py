"""
Domain Models
=============

Internal domain models representing search rows and rerank output.
Used for data transfer between the repository, ranking and rerank steps.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResultRow(BaseModel):
    """
    One product card in a search result.

    Rows come back from the vector store already in this shape, one per
    (product, variant) match; after deduplication there is exactly one
    per ``product_id``.

    Attributes:
        product_id: Logical product identifier
        variant_id: Variant (SKU) that produced the closest match
        product: Display name, translated when available
        variant: Variant key, translated when available
        link: Supplier listing URL
        supplier_id: Supplier identifier
        image: Image reference
        image_source: Where the image came from
        price: Variant unit price
        moq: Minimum order quantity
        lead_time_days: Production lead time in days
        labels: Label keys attached to the product
        cos_distance: Cosine distance to the query (0..2, lower is closer)
        rank_score: Precomputed relevance signal, 0 when absent
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    product_id: int
    variant_id: int
    product: str
    variant: str | None = None
    link: str | None = None
    supplier_id: int | None = None
    image: str | None = None
    image_source: str = "n/a"
    price: Decimal | None = None
    moq: int | None = None
    lead_time_days: int | None = None
    labels: list[str] = Field(default_factory=list)
    cos_distance: Annotated[float, Field(ge=0.0, le=2.0)]
    rank_score: float = 0.0

    @field_validator("labels", mode="before")
    @classmethod
    def none_labels_to_empty(cls, value: list[str] | None) -> list[str]:
        return value or []

    @field_validator("cos_distance", mode="before")
    @classmethod
    def clamp_distance(cls, value: float) -> float:
        # float rounding in <=> can land just outside [0, 2]
        return min(max(float(value), 0.0), 2.0)

    @field_validator("rank_score", mode="before")
    @classmethod
    def none_score_to_zero(cls, value: float | None) -> float:
        return 0.0 if value is None else value


# The store emits candidate rows in the public shape.
CandidateRow = ResultRow


class RerankHit(BaseModel):
    """Position of an input document in the reranked order."""

    index: Annotated[int, Field(ge=0)]
    relevance_score: float | None = None


class RerankFailure(BaseModel):
    """
    Explicit failure reported by a rerank service.

    Returned (not raised) when the service answered but refused or failed
    the request. Transport problems are raised instead.
    """

    message: str
    status_code: int | None = None
