"""
Utilities Package
=================

Logging, exceptions and SQL helpers.
"""

from product_search.utils.errors import (
    ConfigurationError,
    DatabaseError,
    EmbeddingError,
    ProductSearchError,
    RerankError,
    SearchTimeoutError,
    ValidationError,
)
from product_search.utils.logger import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
    log_query_error,
)
from product_search.utils.sql import escape_literal

__all__ = [
    "ProductSearchError",
    "ValidationError",
    "EmbeddingError",
    "DatabaseError",
    "RerankError",
    "SearchTimeoutError",
    "ConfigurationError",
    "configure_logging",
    "bind_request_context",
    "clear_request_context",
    "get_logger",
    "log_query_error",
    "escape_literal",
]
