"""
Tests for Search Schemas
========================

SearchRequest validation, ResultRow normalization and SearchFailure
conversion.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from product_search.schemas.domain import ResultRow
from product_search.schemas.requests import MAX_PAGE_SIZE, SearchRequest
from product_search.schemas.result import Err, Ok, SearchFailure
from product_search.utils.errors import (
    ConfigurationError,
    DatabaseError,
    SearchTimeoutError,
)
from tests.factories import make_row


class TestSearchRequest:
    def test_defaults(self):
        request = SearchRequest(query="bottle")

        assert request.page == 0
        assert request.limit == 20
        assert request.offset == 0
        assert request.product_label_keys == []
        assert not any(
            [request.rerank, request.translated, request.categorized, request.bot_search]
        )

    def test_offset(self):
        assert SearchRequest(query="bottle", page=3, limit=25).offset == 75

    def test_max_page_size(self):
        assert SearchRequest(query="bottle", limit=MAX_PAGE_SIZE).limit == 200

        with pytest.raises(ValidationError):
            SearchRequest(query="bottle", limit=MAX_PAGE_SIZE + 1)

    @pytest.mark.parametrize(
        "field, value",
        [("limit", 0), ("page", -1), ("price_min", Decimal("-0.01")), ("moq_max", -5)],
    )
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            SearchRequest(query="bottle", **{field: value})

    def test_min_greater_than_max_is_accepted(self):
        request = SearchRequest(query="bottle", price_min=Decimal("9"), price_max=Decimal("1"))

        assert request.price_min > request.price_max

    def test_label_keys_are_cleaned(self):
        request = SearchRequest(query="bottle", product_label_keys=[" eco ", "", "  ", "bpa_free"])

        assert request.product_label_keys == ["eco", "bpa_free"]

    def test_null_label_keys(self):
        assert SearchRequest(query="bottle", product_label_keys=None).product_label_keys == []

    def test_empty_query_is_not_a_schema_error(self):
        assert SearchRequest(query="").query == ""


class TestResultRow:
    def test_null_labels_and_score(self):
        row = ResultRow.model_validate(make_row(1, 0.2, rank_score=None, labels=None))

        assert row.labels == []
        assert row.rank_score == 0.0

    @pytest.mark.parametrize(("raw", "expected"), [(-1e-9, 0.0), (2.0000001, 2.0), (0.5, 0.5)])
    def test_distance_is_clamped(self, raw, expected):
        assert ResultRow.model_validate(make_row(1, raw)).cos_distance == expected

    def test_frozen(self):
        row = ResultRow.model_validate(make_row(1, 0.2))

        with pytest.raises(ValidationError):
            row.price = Decimal("1")


class TestSearchFailure:
    def test_from_exception(self):
        failure = SearchFailure.from_exception(
            DatabaseError("Product similarity search failed: boom", details={"limit": 10})
        )

        assert failure.error_type == "database"
        assert failure.message == "Product similarity search failed: boom"
        assert failure.details == {"limit": 10}

    def test_timeout(self):
        assert SearchFailure.from_exception(SearchTimeoutError("late")).error_type == "timeout"

    def test_unknown_type_becomes_internal(self):
        failure = SearchFailure.from_exception(ConfigurationError("OPENAI_API_KEY is required"))

        assert failure.error_type == "internal"

    def test_result_variants(self):
        assert Ok([1]).is_ok
        assert not Err(SearchFailure(message="x")).is_ok
        assert Ok([1]) == Ok([1])
