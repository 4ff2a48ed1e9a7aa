"""
Result Type
===========

Success/failure values returned from the public search entry point.

Callers branch on the variant instead of catching exceptions:

    outcome = await engine.search(request)
    if isinstance(outcome, Err):
        return outcome.error.message
    rows = outcome.value
"""

from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from product_search.utils.errors import ProductSearchError

T = TypeVar("T")
E = TypeVar("E")

FailureType = Literal["validation", "embedding", "database", "rerank", "timeout", "internal"]


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome."""

    error: E

    @property
    def is_ok(self) -> bool:
        return False


class SearchFailure(BaseModel):
    """Human-readable failure of one search request."""

    message: str
    error_type: FailureType = "internal"
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: ProductSearchError) -> "SearchFailure":
        error_type = exc.error_type
        if error_type not in ("validation", "embedding", "database", "rerank", "timeout"):
            error_type = "internal"
        return cls(message=exc.message, error_type=error_type, details=exc.details)
