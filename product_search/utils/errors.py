"""
Custom Exception Classes
========================

Application-specific exceptions for proper error handling.

These are raised by internal helpers. The public search entry point
converts them into an ``Err(SearchFailure)`` value.
"""

from typing import Any


class ProductSearchError(Exception):
    """Base exception for product-search service."""

    error_type = "internal"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ProductSearchError):
    """Raised when input validation fails."""

    error_type = "validation"


class EmbeddingError(ProductSearchError):
    """Raised when embedding generation fails."""

    error_type = "embedding"


class DatabaseError(ProductSearchError):
    """Raised when database operations fail."""

    error_type = "database"


class RerankError(ProductSearchError):
    """Raised when a rerank call returns an unusable response."""

    error_type = "rerank"


class SearchTimeoutError(ProductSearchError):
    """Raised when a search exceeds its deadline."""

    error_type = "timeout"


class ConfigurationError(ProductSearchError):
    """Raised when configuration is invalid."""

    error_type = "configuration"
