"""
Prometheus Metrics for Product Search
=====================================

Metrics are exposed via the /metrics endpoint for Prometheus scraping.

Usage:
    from product_search.metrics import SEARCH_LATENCY, record_search

    with SEARCH_LATENCY.labels(phase="query").time():
        rows = await repo.search_similar_products(...)
"""

from prometheus_client import Counter, Histogram

# =============================================================================
# Metric Definitions
# =============================================================================

SEARCH_REQUESTS_TOTAL = Counter(
    "product_search_requests_total",
    "Total product search requests",
    ["outcome"],  # outcome: success, validation, embedding, database, rerank, timeout
)

SEARCH_LATENCY = Histogram(
    "product_search_latency_seconds",
    "Search latency in seconds per phase",
    ["phase"],  # phase: embedding, query, rerank, total
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")],
)

SEARCH_RESULTS = Histogram(
    "product_search_results",
    "Number of products returned per successful search",
    buckets=[0, 1, 5, 10, 20, 50, 100, 200, float("inf")],
)

RERANK_FALLBACKS_TOTAL = Counter(
    "product_search_rerank_fallbacks_total",
    "Reranks that raised and fell back to the original order",
    ["error_type"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_search(outcome: str, duration_seconds: float, results: int | None = None) -> None:
    """
    Record the outcome of one search request.

    Args:
        outcome: ``success`` or the failure type
        duration_seconds: End-to-end duration
        results: Number of rows returned (successful searches only)
    """
    SEARCH_REQUESTS_TOTAL.labels(outcome=outcome).inc()
    SEARCH_LATENCY.labels(phase="total").observe(duration_seconds)
    if results is not None:
        SEARCH_RESULTS.observe(results)


def record_rerank_fallback(error_type: str) -> None:
    RERANK_FALLBACKS_TOTAL.labels(error_type=error_type).inc()


def get_metrics_app():
    """
    Get ASGI app for /metrics endpoint.

    Returns:
        ASGI application that serves Prometheus metrics
    """
    from prometheus_client import make_asgi_app

    return make_asgi_app()
