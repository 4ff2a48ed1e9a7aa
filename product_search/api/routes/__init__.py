"""
API Routes
==========

Route modules for the product-search service.
"""

from product_search.api.routes.search import router as search_router

__all__ = ["search_router"]
