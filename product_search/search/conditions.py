"""
Query Condition Builder
=======================

Turns the filter part of a SearchRequest into independent SQL predicates
for the product vector query.

Each predicate is either a real constraint or the literal ``true``, so
they can always be AND-ed together. Numeric bounds go through bind
parameters; label keys are the only values interpolated into the text
and they pass through ``escape_literal`` first.

Column aliases used by the predicates:
    p   products
    pv  product_variants
    pl  label aggregate (per product)
"""

from dataclasses import dataclass, field
from typing import Any

from product_search.schemas.requests import SearchRequest
from product_search.utils.sql import escape_literal

TRUE = "true"

# A quoting bot needs a positive price and full shipping dimensions.
BOT_SEARCH_CONDITION = (
    "pv.price > 0"
    " and pv.weight_per_unit_kg is not null"
    " and pv.length_cm is not null"
    " and pv.width_cm is not null"
    " and pv.height_cm is not null"
)


@dataclass(frozen=True)
class SearchConditions:
    """
    Predicates and bind parameters for one search.

    Attributes:
        price: Variant price bounds
        moq: Variant minimum order quantity bounds
        lead_time: Variant lead time bounds
        label_keys: Row filter for the label aggregate CTE
        has_labels: Requires a label match when label keys were given
        translated: Requires a translated title
        categorized: Requires a taxonomy assignment
        bot_search: Requires quoting data on the variant
        params: Bind parameters referenced by the predicates
    """

    price: str = TRUE
    moq: str = TRUE
    lead_time: str = TRUE
    label_keys: str = TRUE
    has_labels: str = TRUE
    translated: str = TRUE
    categorized: str = TRUE
    bot_search: str = TRUE
    params: dict[str, Any] = field(default_factory=dict)

    def detail_predicates(self) -> list[str]:
        """Predicates applied to the joined product/variant rows."""
        return [
            self.bot_search,
            self.price,
            self.moq,
            self.lead_time,
            self.has_labels,
            self.translated,
            self.categorized,
        ]

    @property
    def is_unfiltered(self) -> bool:
        return all(p == TRUE for p in (*self.detail_predicates(), self.label_keys))


class QueryConditionBuilder:
    """
    Builds SearchConditions from a SearchRequest.

    Never raises for missing filters: an absent dimension degrades to
    ``true`` (no constraint), never to "exclude everything".

    Example:
        conditions = QueryConditionBuilder().build(request)
        where = " and ".join(f"({p})" for p in conditions.detail_predicates())
    """

    def build(self, request: SearchRequest) -> SearchConditions:
        params: dict[str, Any] = {}

        price = self._range("pv.price", "price", request.price_min, request.price_max, params)
        moq = self._range("pv.moq", "moq", request.moq_min, request.moq_max, params)
        lead_time = self._range(
            "pv.lead_time_days",
            "lead_time",
            request.lead_time_min,
            request.lead_time_max,
            params,
        )

        label_keys = TRUE
        has_labels = TRUE
        if request.product_label_keys:
            escaped = ", ".join(_label_literal(key) for key in request.product_label_keys)
            label_keys = f"pl.label_key in ({escaped})"
            has_labels = "pl.labels is not null"

        return SearchConditions(
            price=price,
            moq=moq,
            lead_time=lead_time,
            label_keys=label_keys,
            has_labels=has_labels,
            translated="p.title_translated is not null" if request.translated else TRUE,
            categorized="p.taxonomy_id is not null" if request.categorized else TRUE,
            bot_search=BOT_SEARCH_CONDITION if request.bot_search else TRUE,
            params=params,
        )

    @staticmethod
    def _range(
        column: str,
        name: str,
        lower: Any,
        upper: Any,
        params: dict[str, Any],
    ) -> str:
        """Range, one-sided or ``true`` predicate for a single column."""
        clauses = []
        if lower is not None:
            params[f"{name}_min"] = lower
            clauses.append(f"{column} >= :{name}_min")
        if upper is not None:
            params[f"{name}_max"] = upper
            clauses.append(f"{column} <= :{name}_max")
        return " and ".join(clauses) if clauses else TRUE


def _label_literal(key: str) -> str:
    # text() treats ":name" as a bind parameter even inside quotes.
    return escape_literal(key).replace(":", "\\:")
