"""
API Package
===========

FastAPI application and HTTP routes for the product-search service.
"""
