"""
Variant Collapse
================

Variants are embedded and indexed one by one, but a result page shows one
card per product. Deduplication, ordering and paging happen in the vector
query (``row_number() over (partition by product_id ...)``); the engine
runs ``collapse_variants`` over its output as a uniqueness guard.
"""

from collections.abc import Iterable

from product_search.schemas.domain import ResultRow
from product_search.utils.logger import get_logger

logger = get_logger(__name__)


def collapse_variants(rows: Iterable[ResultRow]) -> list[ResultRow]:
    """
    Keep the closest variant of every product.

    Products keep the position of their first appearance. On equal
    distance the earlier row wins, so the result is deterministic for a
    given input order.

    Args:
        rows: Variant-level matches

    Returns:
        One row per product_id
    """
    best: dict[int, ResultRow] = {}
    total = 0
    for row in rows:
        total += 1
        current = best.get(row.product_id)
        if current is None or row.cos_distance < current.cos_distance:
            best[row.product_id] = row

    if total != len(best):
        logger.debug(
            "Collapsed variant matches",
            rows=total,
            products=len(best),
        )
    return list(best.values())
