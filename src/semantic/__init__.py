"""
Semantic retrieval for grounding quiz generation.

Provides:
- Embedding generation (sentence-transformers, all-MiniLM-L6-v2, 384-dim)
- Semantic index adapters (Qdrant, in-memory numpy)
- Context retrieval (keyword seed -> embedding -> top-K documents)

The embedding service is imported lazily by callers that need it, so the
retriever and index adapters stay importable without loading the model stack.
"""

from src.semantic.context_retriever import ContextRetriever, index_documents, normalize_keywords
from src.semantic.vector_index import (
    IndexedDocument,
    IndexMatch,
    InMemorySemanticIndex,
    QdrantSemanticIndex,
    SemanticIndex,
)

__all__ = [
    # Retrieval
    "ContextRetriever",
    "index_documents",
    "normalize_keywords",
    # Index
    "SemanticIndex",
    "IndexedDocument",
    "IndexMatch",
    "InMemorySemanticIndex",
    "QdrantSemanticIndex",
]
