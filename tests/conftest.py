"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for product-search tests.
"""

from unittest.mock import AsyncMock

import pytest

from product_search.config.settings import Settings
from product_search.schemas.domain import ResultRow
from tests.factories import ConnectionFactory, RecordingConnection, make_row


@pytest.fixture
def settings():
    """Settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        cohere_api_key=None,
        hnsw_ef_search_floor=100,
        vector_model_tag="product",
        search_timeout_seconds=5.0,
    )


@pytest.fixture
def mock_embedder():
    """Embedding provider returning a fixed 1536-dimensional vector."""
    embedder = AsyncMock()
    embedder.embed = AsyncMock(return_value=[0.1] * 1536)
    embedder.aclose = AsyncMock()
    return embedder


@pytest.fixture
def sample_rows():
    """Three products in rank order, as the search statement returns them."""
    return [
        make_row(1, 0.10, variant_id=11, rank_score=0.9, product="Steel bottle"),
        make_row(2, 0.20, variant_id=21, rank_score=0.5, product="Glass bottle"),
        make_row(3, 0.30, variant_id=31, rank_score=0.1, product="Bamboo cup"),
    ]


@pytest.fixture
def result_rows(sample_rows):
    return [ResultRow.model_validate(row) for row in sample_rows]


@pytest.fixture
def recording_connection(sample_rows):
    return RecordingConnection(rows=sample_rows)


@pytest.fixture
def connection_factory(recording_connection):
    return ConnectionFactory(recording_connection)
