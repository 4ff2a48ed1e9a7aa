"""
Tests for Rerank Services
=========================

Cohere reranker exercised over httpx.MockTransport.
"""

import json

import httpx
import pytest

from product_search.schemas.domain import RerankFailure, RerankHit
from product_search.services.reranker import (
    CohereReranker,
    PassthroughReranker,
    create_reranker,
)
from product_search.utils.errors import RerankError


def cohere(handler):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="https://api.cohere.test/v1",
    )
    return CohereReranker(api_key="co-test", model="rerank-english-v3.0", client=client)


class TestCohereReranker:
    @pytest.mark.asyncio
    async def test_rerank_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "results": [
                        {"index": 2, "relevance_score": 0.91},
                        {"index": 0, "relevance_score": 0.40},
                    ]
                },
            )

        hits = await cohere(handler).rerank("bottle", ["a", "b", "c"], top_k=2)

        assert hits == [
            RerankHit(index=2, relevance_score=0.91),
            RerankHit(index=0, relevance_score=0.40),
        ]
        assert seen["path"] == "/v1/rerank"
        assert seen["body"] == {
            "query": "bottle",
            "documents": ["a", "b", "c"],
            "top_n": 2,
            "model": "rerank-english-v3.0",
        }

    @pytest.mark.asyncio
    async def test_top_n_capped_at_document_count(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": []})

        await cohere(handler).rerank("bottle", ["a"], top_k=20)

        assert seen["body"]["top_n"] == 1

    @pytest.mark.asyncio
    async def test_error_status_returns_failure(self):
        reranker = cohere(
            lambda request: httpx.Response(429, json={"message": "You are being rate limited"})
        )

        outcome = await reranker.rerank("bottle", ["a", "b"], top_k=2)

        assert outcome == RerankFailure(message="You are being rate limited", status_code=429)

    @pytest.mark.asyncio
    async def test_error_without_message(self):
        reranker = cohere(lambda request: httpx.Response(503, text="unavailable"))

        outcome = await reranker.rerank("bottle", ["a"], top_k=1)

        assert isinstance(outcome, RerankFailure)
        assert outcome.message.startswith("Cohere API error: 503")

    @pytest.mark.asyncio
    async def test_malformed_response_raises(self):
        reranker = cohere(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(RerankError):
            await reranker.rerank("bottle", ["a"], top_k=1)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(httpx.ConnectError):
            await cohere(handler).rerank("bottle", ["a"], top_k=1)

    @pytest.mark.asyncio
    async def test_out_of_range_index_dropped(self):
        reranker = cohere(
            lambda request: httpx.Response(200, json={"results": [{"index": 7}, {"index": 0}]})
        )

        hits = await reranker.rerank("bottle", ["a"], top_k=2)

        assert hits == [RerankHit(index=0)]

    @pytest.mark.asyncio
    async def test_empty_documents_make_no_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert await cohere(handler).rerank("bottle", [], top_k=5) == []


class TestPassthroughReranker:
    @pytest.mark.asyncio
    async def test_keeps_order(self):
        hits = await PassthroughReranker().rerank("q", ["a", "b", "c"], top_k=2)

        assert [h.index for h in hits] == [0, 1]


class TestCreateReranker:
    def test_passthrough_without_key(self, settings):
        assert isinstance(create_reranker(settings), PassthroughReranker)

    def test_cohere_with_key(self, settings):
        settings = settings.model_copy(update={"cohere_api_key": "co-test"})

        assert isinstance(create_reranker(settings), CohereReranker)
