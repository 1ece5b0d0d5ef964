"""
Context Retriever - best-effort grounding context from the semantic index.

Steps:
1. Ask the generation model for 5-8 comma-separated keywords summarizing the source
2. Embed the keyword line
3. Query the semantic index for the top-K nearest reference documents
4. Join their text with a delimiter and map each hit to a SourceAttribution

Retrieval is augmentation, not a dependency: any failure yields an empty
context wrapped in a degraded StageOutcome, never an exception.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence

from loguru import logger

from src.core.outcome import StageOutcome
from src.generation.llm_client import TextModel
from src.generation.prompts import get_keyword_prompt
from src.quiz.pipeline_config import PipelineConfig
from src.quiz.schemas import RetrievedContext, SourceAttribution
from src.semantic.vector_index import IndexedDocument, IndexMatch, SemanticIndex

MIN_KEYWORDS = 5
MAX_KEYWORDS = 8


class Embedder(Protocol):
    def embed(self, text: str) -> list[float]:
        ...

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        ...


def normalize_keywords(raw: str) -> str:
    """Reduce a model reply to one comma-separated line of at most 8 keywords."""
    line = next((l for l in raw.strip().splitlines() if l.strip()), "")
    keywords = [k.strip().strip("\"'`*-. ") for k in line.split(",")]
    keywords = [k for k in keywords if k]
    return ", ".join(keywords[:MAX_KEYWORDS])


class ContextRetriever:
    """
    Derives a topic seed from study text and pulls related documents.

    Example:
        >>> retriever = ContextRetriever(model, EmbeddingService(), index)
        >>> outcome = retriever.retrieve(study_text)
        >>> outcome.value.sources  # [] when retrieval degraded
    """

    def __init__(
        self,
        keyword_model: TextModel,
        embedder: Embedder,
        index: SemanticIndex,
        config: Optional[PipelineConfig] = None,
    ):
        self.keyword_model = keyword_model
        self.embedder = embedder
        self.index = index
        self.config = config or PipelineConfig()

    def retrieve(self, source_text: str) -> StageOutcome[RetrievedContext]:
        """Return retrieved context, or an empty context if any step fails."""
        try:
            context = self._retrieve(source_text)
        except Exception as e:
            logger.warning(f"Context retrieval failed, continuing without context: {e}")
            return StageOutcome.fallback(RetrievedContext(), str(e))

        logger.info(f"Retrieved {len(context.sources)} context sources")
        return StageOutcome.ok(context)

    def _retrieve(self, source_text: str) -> RetrievedContext:
        seed_limit = self.config.keyword_seed_limit
        reply = self.keyword_model.complete(
            get_keyword_prompt(source_text[:seed_limit]),
            temperature=self.config.keyword_temperature,
        )
        seed = normalize_keywords(reply)
        if not seed:
            raise ValueError("Keyword extraction returned nothing usable")
        if len(seed.split(",")) < MIN_KEYWORDS:
            logger.debug(f"Keyword seed has fewer than {MIN_KEYWORDS} keywords: {seed}")

        vector = self.embedder.embed(seed[:seed_limit])
        matches = self.index.query(vector, self.config.retrieval_top_k)
        return self._to_context(matches)

    def _to_context(self, matches: Sequence[IndexMatch]) -> RetrievedContext:
        texts = []
        sources = []
        for match in matches:
            metadata = match.metadata or {}
            text = metadata.get("text")
            if text:
                texts.append(str(text))
            sources.append(
                SourceAttribution(
                    id=match.id,
                    title=metadata.get("title") or "Untitled Source",
                    url=metadata.get("url"),
                    relevance_score=match.score,
                )
            )
        return RetrievedContext(text=self.config.context_delimiter.join(texts), sources=sources)

    def index_documents(self, documents: Sequence[IndexedDocument]) -> int:
        """Embed and upsert reference documents so later retrievals can find them."""
        return index_documents(self.embedder, self.index, documents)


def index_documents(embedder: Embedder, index: SemanticIndex, documents: Sequence[IndexedDocument]) -> int:
    """Embed ``documents`` and upsert them into ``index``. Returns the count written."""
    if not documents:
        return 0
    vectors = embedder.embed_batch([doc.text for doc in documents])
    count = index.upsert(documents, vectors)
    logger.info(f"Indexed {count} reference documents")
    return count
