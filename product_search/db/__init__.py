"""
Database Package
================

Database models, connection management, and repositories.
"""

from product_search.db.connection import (
    DatabaseManager,
    close_database,
    health_check,
    init_database,
)
from product_search.db.models import (
    Base,
    Product,
    ProductEmbedding,
    ProductLabel,
    ProductSearchMetrics,
    ProductVariant,
    ProductVectorStore,
)

__all__ = [
    # Models
    "Base",
    "Product",
    "ProductVariant",
    "ProductLabel",
    "ProductEmbedding",
    "ProductVectorStore",
    "ProductSearchMetrics",
    # Connection
    "DatabaseManager",
    "init_database",
    "close_database",
    "health_check",
]
