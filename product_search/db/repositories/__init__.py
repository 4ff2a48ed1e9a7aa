"""
Database Repositories
=====================

Data access layer following repository pattern.

Components:
    - ProductVectorRepository: two-phase product similarity search
"""

from product_search.db.repositories.product_vector_repo import (
    ProductVectorRepository,
    ef_search_for,
    format_embedding,
)

__all__ = [
    "ProductVectorRepository",
    "ef_search_for",
    "format_embedding",
]
