"""
Semantic Index Adapters.

Call contract used by the Context Retriever:

    query(vector, top_k) -> [IndexMatch(id, score, metadata={text, title, url?})]

Implementations:
- QdrantSemanticIndex: Qdrant collection with cosine distance
- InMemorySemanticIndex: numpy cosine ranking over documents held in memory,
  for offline runs and tests
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
from loguru import logger


@dataclass(frozen=True)
class IndexedDocument:
    """A reference document stored in the semantic index."""

    id: str
    text: str
    title: str = "Untitled Source"
    url: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        payload = {"doc_id": self.id, "text": self.text, "title": self.title}
        if self.url:
            payload["url"] = self.url
        return payload


@dataclass(frozen=True)
class IndexMatch:
    """A nearest-neighbour hit returned by an index query."""

    id: str
    score: Optional[float]
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class SemanticIndex(Protocol):
    """Vector store the retriever queries for grounding context."""

    def query(self, vector: Sequence[float], top_k: int) -> list[IndexMatch]:
        ...

    def upsert(self, documents: Sequence[IndexedDocument], vectors: Sequence[Sequence[float]]) -> int:
        ...


def _check_lengths(documents: Sequence[IndexedDocument], vectors: Sequence[Sequence[float]]) -> None:
    if len(documents) != len(vectors):
        raise ValueError(f"Got {len(documents)} documents but {len(vectors)} vectors")


# =============================================================================
# Qdrant
# =============================================================================


class QdrantSemanticIndex:
    """
    Qdrant-backed semantic index.

    Qdrant point ids must be integers or UUIDs, so each document id is
    mapped to a deterministic UUID and the original id travels in the
    payload as ``doc_id``.
    """

    def __init__(
        self,
        url: str,
        collection_name: str,
        dimension: int = 384,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Any = None,
    ):
        from qdrant_client import QdrantClient

        self.collection_name = collection_name
        self.dimension = dimension
        self.client = client or QdrantClient(url=url, api_key=api_key, timeout=int(timeout))
        self._collection_ready = False
        logger.debug(f"Qdrant index configured: {url} / {collection_name}")

    @staticmethod
    def point_id(document_id: str) -> str:
        return str(uuid.uuid5(uuid.NAMESPACE_URL, document_id))

    def ensure_collection(self) -> None:
        """Create the collection on first write if it does not exist."""
        if self._collection_ready:
            return

        from qdrant_client.models import Distance, VectorParams

        names = {c.name for c in self.client.get_collections().collections}
        if self.collection_name not in names:
            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=self.dimension, distance=Distance.COSINE),
            )
            logger.info(f"Created Qdrant collection: {self.collection_name}")
        self._collection_ready = True

    def query(self, vector: Sequence[float], top_k: int) -> list[IndexMatch]:
        response = self.client.query_points(
            collection_name=self.collection_name,
            query=list(vector),
            limit=top_k,
            with_payload=True,
        )
        matches = []
        for point in response.points:
            payload = dict(point.payload or {})
            doc_id = str(payload.pop("doc_id", point.id))
            matches.append(IndexMatch(id=doc_id, score=point.score, metadata=payload))
        return matches

    def upsert(self, documents: Sequence[IndexedDocument], vectors: Sequence[Sequence[float]]) -> int:
        _check_lengths(documents, vectors)
        if not documents:
            return 0

        from qdrant_client.models import PointStruct

        self.ensure_collection()
        points = [
            PointStruct(id=self.point_id(doc.id), vector=list(vec), payload=doc.to_payload())
            for doc, vec in zip(documents, vectors)
        ]
        self.client.upsert(collection_name=self.collection_name, points=points)
        logger.info(f"Upserted {len(points)} documents into {self.collection_name}")
        return len(points)

    def close(self) -> None:
        self.client.close()


# =============================================================================
# In-memory
# =============================================================================


class InMemorySemanticIndex:
    """
    Cosine-similarity index over documents held in memory.

    Similarity is calculated in Python using numpy; ties keep insertion order.
    """

    def __init__(self):
        self._documents: dict[str, IndexedDocument] = {}
        self._vectors: dict[str, np.ndarray] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def upsert(self, documents: Sequence[IndexedDocument], vectors: Sequence[Sequence[float]]) -> int:
        _check_lengths(documents, vectors)
        for doc, vec in zip(documents, vectors):
            self._documents[doc.id] = doc
            self._vectors[doc.id] = np.asarray(vec, dtype=np.float64)
        return len(documents)

    def query(self, vector: Sequence[float], top_k: int) -> list[IndexMatch]:
        if not self._documents or top_k <= 0:
            return []

        query_vec = np.asarray(vector, dtype=np.float64)
        query_norm = np.linalg.norm(query_vec)

        scored = []
        for doc_id, doc_vec in self._vectors.items():
            norm = np.linalg.norm(doc_vec) * query_norm
            score = float(np.dot(doc_vec, query_vec) / norm) if norm else 0.0
            scored.append((doc_id, score))

        scored.sort(key=lambda pair: pair[1], reverse=True)

        matches = []
        for doc_id, score in scored[:top_k]:
            payload = self._documents[doc_id].to_payload()
            payload.pop("doc_id")
            matches.append(IndexMatch(id=doc_id, score=score, metadata=payload))
        return matches
