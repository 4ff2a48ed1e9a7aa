"""
Search Package
==============

Query pipeline: filter conditions, variant collapse, rerank and the
engine tying them to the embedding provider and the vector store.
"""

from product_search.search.conditions import (
    BOT_SEARCH_CONDITION,
    QueryConditionBuilder,
    SearchConditions,
)
from product_search.search.engine import (
    NO_QUERY_MESSAGE,
    VectorSearchEngine,
    get_search_engine,
)
from product_search.search.ranking import collapse_variants
from product_search.search.rerank import RerankOrchestrator

__all__ = [
    "BOT_SEARCH_CONDITION",
    "QueryConditionBuilder",
    "SearchConditions",
    "NO_QUERY_MESSAGE",
    "VectorSearchEngine",
    "get_search_engine",
    "collapse_variants",
    "RerankOrchestrator",
]
