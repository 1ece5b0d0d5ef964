"""
Quiz Pipeline - turns raw study text into a validated quiz.

Stations:
1. Chunking - sentence-aligned slices, capped at ``max_chunks``
2. Quota distribution - proportional to chunk length, exact total
3. Context retrieval - best effort, awaited before generation
4. Generation - one model call per chunk with a non-zero quota, concurrent
5. Validation - structural rules + one batched semantic call
6. Selection - accepted questions, or fallback ranking when none pass
7. Shortfall pass - at most one extra call when too few were accepted

Only configuration problems abort a run. Everything else degrades: a
failed chunk loses its quota, failed retrieval means no context, a failed
validator means structural checks alone decide.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional, Sequence

from loguru import logger

from config import Settings, get_settings
from src.core.exceptions import ConfigurationError, GenerationError
from src.generation.llm_client import TextModel, build_text_model
from src.generation.question_generator import QuestionGenerator, new_question_id
from src.processing.chunker import Chunk, SourceChunker
from src.quiz.distribution import distribute_quota
from src.quiz.pipeline_config import PipelineConfig
from src.quiz.schemas import (
    CandidateQuestion,
    Difficulty,
    QuestionType,
    QuizArtifact,
    QuizRequest,
    RetrievedContext,
)
from src.quiz.selector import SelectionResult, select_questions
from src.quiz.validator import QuizValidator
from src.semantic.context_retriever import ContextRetriever


def quiz_title(difficulty: str, now: Optional[datetime] = None) -> str:
    """e.g. ``AI Quiz (medium) - Oct 19, 2026 14:05``"""
    now = now or datetime.now()
    return f"AI Quiz ({difficulty}) - {now.strftime('%b %d, %Y %H:%M')}"


def ensure_unique_ids(candidates: list[CandidateQuestion]) -> list[CandidateQuestion]:
    """Re-assign any id already used earlier in the pool."""
    seen: set[str] = set()
    unique = []
    for question in candidates:
        if question.id in seen:
            question = question.model_copy(update={"id": new_question_id()})
        seen.add(question.id)
        unique.append(question)
    return unique


class QuizPipeline:
    """
    Content-to-quiz orchestrator.

    Example:
        >>> pipeline = QuizPipeline.from_settings()
        >>> artifact = pipeline.generate_quiz(QuizRequest(text=notes, requested_count=5))
        >>> artifact.validation_report.passed
    """

    def __init__(
        self,
        generation_model: Optional[TextModel],
        validation_model: Optional[TextModel],
        retriever: Optional[ContextRetriever] = None,
        config: Optional[PipelineConfig] = None,
    ):
        if generation_model is None:
            raise ConfigurationError("Generation model is not configured")
        if validation_model is None:
            raise ConfigurationError("Validation model is not configured")

        self.config = config or PipelineConfig()
        self.generation_model = generation_model
        self.validation_model = validation_model
        self.retriever = retriever
        self.chunker = SourceChunker(
            max_chars=self.config.chunk_max_chars,
            cut_ratio=self.config.sentence_cut_ratio,
        )
        self.generator = QuestionGenerator(generation_model, self.config)
        self.validator = QuizValidator(validation_model, self.config)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        use_retrieval: bool = True,
    ) -> "QuizPipeline":
        """
        Wire models, retrieval and defaults from environment settings.

        Raises:
            ConfigurationError: a model provider is missing its key or unknown
        """
        settings = settings or get_settings()
        config = PipelineConfig.from_settings(settings)

        generation_model = build_text_model(settings.generation_provider, settings.ai_model, settings)
        validation_model = build_text_model(settings.validation_provider, settings.validation_model, settings)

        retriever = None
        if use_retrieval and settings.has_index_configured():
            from src.semantic.embedding_service import EmbeddingService
            from src.semantic.vector_index import QdrantSemanticIndex

            index = QdrantSemanticIndex(
                url=settings.qdrant_url,
                collection_name=settings.qdrant_collection,
                dimension=settings.embedding_dimension,
                api_key=settings.qdrant_api_key,
            )
            retriever = ContextRetriever(generation_model, EmbeddingService(), index, config)
        elif use_retrieval:
            logger.info("No semantic index configured; generating without retrieved context")

        return cls(generation_model, validation_model, retriever=retriever, config=config)

    def close(self) -> None:
        """Close the semantic index connection, if the index holds one."""
        if self.retriever is None:
            return
        close = getattr(self.retriever.index, "close", None)
        if close is not None:
            close()

    # =========================================================================
    # Entry points
    # =========================================================================

    def generate_quiz(self, request: QuizRequest) -> QuizArtifact:
        """Blocking entry point for scripts and the CLI."""
        return asyncio.run(self.generate_quiz_async(request))

    async def generate_quiz_async(self, request: QuizRequest) -> QuizArtifact:
        """Run every station and return the final artifact."""
        config = self.config
        requested = request.requested_count or config.default_count
        difficulty = request.difficulty or config.default_difficulty
        allowed_types = list(request.allowed_types or config.default_types)
        language = request.language_code or config.default_language
        content_source = request.content_source or config.default_content_source
        model_calls = 0

        chunks = self.chunker.chunk(request.text)
        if len(chunks) > config.max_chunks:
            logger.info(f"Capping {len(chunks)} chunks at {config.max_chunks}")
            chunks = chunks[: config.max_chunks]
        quotas = distribute_quota(requested, [max(1, c.weight) for c in chunks])
        logger.info(f"Quiz run: {len(chunks)} chunks, quotas={quotas}, requested={requested}")

        # Station 3
        context = await self._retrieve_context(request.text)
        if self.retriever is not None:
            model_calls += 1

        # Station 4
        semaphore = asyncio.Semaphore(config.generation_concurrency)
        jobs = [
            self._generate_for_chunk(semaphore, index, chunk, quota, context, difficulty, allowed_types, language)
            for index, (chunk, quota) in enumerate(zip(chunks, quotas))
            if quota > 0
        ]
        model_calls += len(jobs)
        results = await asyncio.gather(*jobs)
        pool = ensure_unique_ids([q for batch in results for q in batch])

        # Stations 5-6
        selection = await self._validate_and_select(pool, context, language, requested)
        if pool:
            model_calls += 1

        # Station 7
        shortfall = requested - selection.accepted_count
        if shortfall > 0 and config.enable_shortfall_pass:
            logger.info(f"Accepted {selection.accepted_count}/{requested}; requesting {shortfall} more")
            model_calls += 1
            extra = await self._generate_shortfall(
                request.text, shortfall, context, difficulty, allowed_types, language
            )
            if extra:
                pool = ensure_unique_ids(pool + extra)
                selection = await self._validate_and_select(pool, context, language, requested)
                model_calls += 1

        artifact = QuizArtifact(
            title=quiz_title(difficulty.value),
            difficulty=difficulty,
            question_count=len(selection.questions),
            questions=selection.questions,
            language=language,
            content_source=content_source,
            validation_report=selection.report,
            retrieved_sources=context.sources,
        )

        report = selection.report
        logger.info(
            f"Quiz ready: {report.passed}/{requested} questions "
            f"(pool={report.total}, filtered={report.filtered_out}, fallback={selection.used_fallback})"
        )
        logger.bind(
            usage=True,
            kind="quiz-generation",
            generation_model=self.generation_model.model_name,
            validation_model=self.validation_model.model_name,
            requested_count=requested,
            returned_count=artifact.question_count,
            model_calls=model_calls,
        ).info(f"quiz-generation usage: {model_calls} model calls")
        return artifact

    # =========================================================================
    # Stations
    # =========================================================================

    async def _retrieve_context(self, text: str) -> RetrievedContext:
        if self.retriever is None:
            return RetrievedContext()
        outcome = await asyncio.to_thread(self.retriever.retrieve, text)
        return outcome.value

    async def _generate_for_chunk(
        self,
        semaphore: asyncio.Semaphore,
        index: int,
        chunk: Chunk,
        quota: int,
        context: RetrievedContext,
        difficulty: Difficulty,
        allowed_types: Sequence[QuestionType],
        language: str,
    ) -> list[CandidateQuestion]:
        """One chunk's generation call; failure loses this chunk's quota only."""
        async with semaphore:
            try:
                return await asyncio.to_thread(
                    self.generator.generate,
                    chunk.text,
                    context,
                    quota,
                    difficulty,
                    allowed_types,
                    language,
                    index,
                )
            except GenerationError as e:
                logger.warning(f"Skipping chunk {index} (quota {quota} lost): {e}")
                return []

    async def _generate_shortfall(
        self,
        text: str,
        shortfall: int,
        context: RetrievedContext,
        difficulty: Difficulty,
        allowed_types: Sequence[QuestionType],
        language: str,
    ) -> list[CandidateQuestion]:
        limit = self.config.shortfall_source_limit
        try:
            return await asyncio.to_thread(
                self.generator.generate,
                text[:limit],
                context,
                shortfall,
                difficulty,
                allowed_types,
                language,
                content_limit=limit,
            )
        except GenerationError as e:
            logger.warning(f"Shortfall pass failed: {e}")
            return []

    async def _validate_and_select(
        self,
        pool: list[CandidateQuestion],
        context: RetrievedContext,
        language: str,
        requested: int,
    ) -> SelectionResult:
        verdicts = await asyncio.to_thread(self.validator.validate, pool, context, language)
        return select_questions(pool, verdicts, requested)
