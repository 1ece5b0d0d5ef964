"""
Embedding Service - Generate semantic embeddings using sentence-transformers.

Uses all-MiniLM-L6-v2 model (384 dimensions) by default. Embeddings feed
the semantic index twice: when reference documents are indexed, and when
the retrieval keyword seed for a quiz is turned into a query vector.

References:
- https://www.sbert.net/docs/pretrained_models.html
- https://huggingface.co/sentence-transformers/all-MiniLM-L6-v2
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from loguru import logger
from sentence_transformers import SentenceTransformer

from config import get_settings

DEFAULT_BATCH_SIZE = 32


class EmbeddingService:
    """
    Generate fixed-dimension embeddings for retrieval.

    The model is lazy-loaded on first use to avoid startup delays.

    Example:
        >>> service = EmbeddingService()
        >>> vector = service.embed("photosynthesis, chlorophyll, light reactions")
        >>> len(vector)  # 384
    """

    def __init__(self, model_name: str | None = None, dimension: int | None = None):
        """
        Initialize the embedding service.

        Args:
            model_name: Sentence transformer model to use.
                        Defaults to config value (all-MiniLM-L6-v2).
            dimension: Expected embedding dimension. Defaults to config value.
        """
        settings = get_settings()
        self.model_name = model_name or settings.embedding_model
        self.expected_dimension = dimension or settings.embedding_dimension
        self._model: SentenceTransformer | None = None

    @property
    def model(self) -> SentenceTransformer:
        """
        Lazy load the model on first use.

        The model is downloaded from HuggingFace Hub on first run (~90MB).
        Subsequent runs use the cached version.
        """
        if self._model is None:
            logger.info(f"Loading embedding model: {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
            logger.info(
                f"Embedding model loaded: {self.model_name} ({self.expected_dimension}-dim)"
            )
        return self._model

    def _check_dimension(self, vector: np.ndarray) -> None:
        if vector.shape[-1] != self.expected_dimension:
            raise ValueError(
                f"Embedding dimension {vector.shape[-1]} does not match expected {self.expected_dimension}"
            )

    def embed(self, text: str) -> list[float]:
        """Embed a single text into a list of floats."""
        embedding = self.model.encode(text, convert_to_numpy=True)
        vector = np.asarray(embedding, dtype=np.float32)
        self._check_dimension(vector)
        return vector.tolist()

    def embed_batch(self, texts: Sequence[str], batch_size: int = DEFAULT_BATCH_SIZE) -> list[list[float]]:
        """
        Embed multiple texts efficiently.

        Uses batched processing for better GPU/CPU utilization. Document
        ingestion goes through here.
        """
        if not texts:
            return []

        logger.info(f"Generating embeddings for {len(texts)} texts (batch_size={batch_size})")
        embeddings = self.model.encode(
            list(texts),
            batch_size=batch_size,
            show_progress_bar=False,
            convert_to_numpy=True,
        )
        matrix = np.asarray(embeddings, dtype=np.float32)
        self._check_dimension(matrix)
        return matrix.tolist()
