"""
Product Vector Repository
=========================

Data access layer for product similarity search over pgvector.

The search runs in two phases inside one statement:
1. Candidate selection: the ``limit`` nearest product-level embeddings
   from the HNSW index (``product_embeddings``).
2. Detail pass: candidates joined to their variant embeddings, variants,
   labels and rank scores; filters applied; one row per product kept
   (closest variant); ordered by rank score then distance; paginated.

Follows Repository Pattern: Abstracts database operations.
"""

import re
from typing import TYPE_CHECKING, Any

from sqlalchemy import TextClause, text
from sqlalchemy.ext.asyncio import AsyncConnection

from product_search.schemas.domain import ResultRow
from product_search.utils.errors import DatabaseError
from product_search.utils.logger import get_logger, log_query_error

if TYPE_CHECKING:
    from product_search.search.conditions import SearchConditions

logger = get_logger(__name__)

COMPONENT = "productVectorStore"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

_SEARCH_SQL = """
with product_limit as (
    select
        product_id,
        embedding <=> cast(:embedding as vector) as cos_dist
    from {candidate_table}
    where model = :model_tag
    order by cos_dist
    limit :limit
)
, pl as (
    select
        product_id,
        array_agg(label_key) as labels
    from {label_table} pl
    where {label_keys}
    group by 1
)
, vectors as (
    select
        pvs.product_id,
        pvs.product_variant_id as variant_id,
        coalesce(p.title_translated, p.title) as product,
        coalesce(pv.product_variant_key_translated, pv.product_variant_key) as variant,
        p.link,
        p.supplier_id,
        coalesce(pv.images[1], p.image_urls_clean[1], p.image_urls[1]) as image,
        case
            when pv.images[1] is not null then 'variant'
            when p.image_urls_clean[1] is not null then 'product - clean'
            when p.image_urls[1] is not null then 'product - raw'
            else 'n/a'
        end as image_source,
        pv.price,
        pv.moq,
        pv.lead_time_days,
        pl.labels,
        pvs.embedding <=> cast(:embedding as vector) as cos_distance,
        coalesce(psm.final_score, 0) as rank_score
    from {store_table} pvs
    join products p
        on pvs.product_id = p.product_id
    join product_variants pv
        on pvs.product_variant_id = pv.product_variant_id
    join product_limit c
        on pvs.product_id = c.product_id
    left join pl
        on pvs.product_id = pl.product_id
    left join product_search_metrics psm
        on pvs.product_id = psm.product_id
    where pvs.model = :model_tag
        and {detail_conditions}
)
, dedupe as (
    select
        *,
        row_number() over (
            partition by product_id order by cos_distance, variant_id
        ) as rn
    from vectors
)
select
    product_id,
    variant_id,
    product,
    variant,
    link,
    supplier_id,
    image,
    image_source,
    price,
    moq,
    lead_time_days,
    labels,
    cos_distance,
    rank_score
from dedupe d
where d.rn = 1
order by d.rank_score desc, d.cos_distance, d.product_id
offset :offset
limit :limit
"""


def ef_search_for(limit: int, floor: int = 100) -> int:
    """HNSW search width for a page size: never narrower than ``floor``."""
    return max(floor, limit * 2)


def format_embedding(embedding: list[float]) -> str:
    """Render a vector in pgvector's text format."""
    return f"[{','.join(str(float(x)) for x in embedding)}]"


class ProductVectorRepository:
    """
    Repository for product similarity search.

    Works on a single checked-out connection: the recall setting written
    by ``set_ef_search`` is transaction-local and only affects statements
    issued afterwards on the same connection.

    Usage:
        async with DatabaseManager.connection() as conn:
            repo = ProductVectorRepository(conn)
            await repo.set_ef_search(ef_search_for(limit))
            rows = await repo.search_similar_products(embedding, conditions, limit, offset)
    """

    def __init__(
        self,
        connection: AsyncConnection,
        model_tag: str = "product",
        candidate_table: str = "public.product_embeddings",
        store_table: str = "public.product_vector_store",
        label_table: str = "public.product_labels",
    ) -> None:
        """
        Initialize repository with a checked-out connection.

        Args:
            connection: SQLAlchemy async connection (inside a transaction)
            model_tag: Embedding model/type rows are restricted to
            candidate_table: Product-level embedding table (HNSW indexed)
            store_table: Variant-level embedding table
            label_table: Product label table

        Raises:
            ValueError: If a table name is not a plain (schema.)identifier
        """
        for name in (candidate_table, store_table, label_table):
            if not _IDENTIFIER.match(name):
                raise ValueError(f"Invalid table name: {name!r}")

        self._conn = connection
        self._model_tag = model_tag
        self._candidate_table = candidate_table
        self._store_table = store_table
        self._label_table = label_table

    async def set_ef_search(self, value: int) -> None:
        """
        Set ``hnsw.ef_search`` for the current transaction.

        Raises:
            DatabaseError: If the statement fails
        """
        try:
            await self._conn.execute(
                text("select set_config('hnsw.ef_search', :value, true)"),
                {"value": str(int(value))},
            )
        except Exception as e:
            log_query_error(COMPONENT, "set_ef_search", str(e), ef_search=value)
            raise DatabaseError(
                message=f"Failed to set hnsw.ef_search: {e}",
                details={"ef_search": value},
            ) from e

        logger.debug("hnsw.ef_search set", ef_search=value)

    def build_search_query(self, conditions: "SearchConditions") -> TextClause:
        """Render the search statement for the given filter predicates."""
        detail = "\n        and ".join(f"({p})" for p in conditions.detail_predicates())
        return text(
            _SEARCH_SQL.format(
                candidate_table=self._candidate_table,
                store_table=self._store_table,
                label_table=self._label_table,
                label_keys=conditions.label_keys,
                detail_conditions=detail,
            )
        )

    def build_search_params(
        self,
        embedding: list[float],
        conditions: "SearchConditions",
        limit: int,
        offset: int,
    ) -> dict[str, Any]:
        return {
            "embedding": format_embedding(embedding),
            "model_tag": self._model_tag,
            "limit": limit,
            "offset": offset,
            **conditions.params,
        }

    async def search_similar_products(
        self,
        embedding: list[float],
        conditions: "SearchConditions",
        limit: int,
        offset: int = 0,
    ) -> list[ResultRow]:
        """
        Run the two-phase similarity search.

        Args:
            embedding: Query vector
            conditions: Filter predicates and their bind parameters
            limit: Candidate pool size and page size
            offset: Row offset of the page

        Returns:
            One ResultRow per product, ordered by rank score then distance

        Raises:
            DatabaseError: If the query fails
        """
        query = self.build_search_query(conditions)
        params = self.build_search_params(embedding, conditions, limit, offset)

        try:
            result = await self._conn.execute(query, params)
            rows = result.mappings().all()
        except Exception as e:
            log_query_error(
                COMPONENT,
                "search_similar_products",
                str(e),
                limit=limit,
                offset=offset,
            )
            raise DatabaseError(
                message=f"Product similarity search failed: {e}",
                details={"limit": limit, "offset": offset},
            ) from e

        results = [ResultRow.model_validate(dict(row)) for row in rows]

        logger.debug(
            "Similarity search completed",
            results_count=len(results),
            limit=limit,
            offset=offset,
        )
        return results
