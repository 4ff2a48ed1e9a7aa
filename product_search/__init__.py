"""
Product Search Service
======================

Semantic product search over supplier catalogs.

Features:
- Query embeddings via OpenAI or Ollama
- Filtered nearest-neighbour search using pgvector (HNSW)
- One result per product, ordered by precomputed rank score
- Optional Cohere rerank with fallback to the original order

"""

__version__ = "1.0.0"
