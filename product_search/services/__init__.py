"""
External Services
=================

Collaborators the search pipeline talks to over the network.

Components:
    - EmbeddingProvider: query text -> vector (OpenAI, Ollama)
    - Reranker: cross-encoder reordering (Cohere, passthrough)
"""

from product_search.services.embedding import (
    EmbeddingProvider,
    OllamaEmbeddingProvider,
    OpenAIEmbeddingProvider,
    create_embedding_provider,
)
from product_search.services.reranker import (
    CohereReranker,
    PassthroughReranker,
    Reranker,
    create_reranker,
)

__all__ = [
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "create_embedding_provider",
    "Reranker",
    "CohereReranker",
    "PassthroughReranker",
    "create_reranker",
]
