"""
Quiz router for AI quiz generation.

Endpoints for:
- Generating a validated quiz from study text
- Progressive hints for a single question
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from config import get_settings
from src.core.exceptions import ConfigurationError, GenerationError
from src.generation.hint_generator import HintGenerator
from src.generation.llm_client import build_text_model
from src.quiz.pipeline import QuizPipeline
from src.quiz.schemas import CandidateQuestion, QuestionHint, QuizArtifact, QuizRequest


router = APIRouter()


# ========================================
# Request Models
# ========================================


class HintRequest(BaseModel):
    """Request model for question hints."""

    question: CandidateQuestion
    language_code: str = Field("en", alias="languageCode")

    model_config = {"populate_by_name": True}


# ========================================
# Dependencies
# ========================================


@lru_cache
def shared_pipeline() -> QuizPipeline:
    """One pipeline per process so the embedding model and index client are reused."""
    return QuizPipeline.from_settings()


@lru_cache
def shared_hint_generator() -> HintGenerator:
    settings = get_settings()
    return HintGenerator(build_text_model(settings.generation_provider, settings.ai_model, settings))


def close_shared_instances() -> None:
    """Release the cached pipeline's index connection. Called on shutdown."""
    if shared_pipeline.cache_info().currsize:
        shared_pipeline().close()
    shared_pipeline.cache_clear()
    shared_hint_generator.cache_clear()


def get_pipeline() -> QuizPipeline:
    """Shared pipeline built from settings. Overridden in tests."""
    try:
        return shared_pipeline()
    except ConfigurationError as exc:
        logger.error(f"Quiz pipeline unavailable: {exc}")
        raise HTTPException(status_code=503, detail=str(exc))


def get_hint_generator() -> HintGenerator:
    try:
        return shared_hint_generator()
    except ConfigurationError as exc:
        logger.error(f"Hint generator unavailable: {exc}")
        raise HTTPException(status_code=503, detail=str(exc))


# ========================================
# Endpoints
# ========================================


@router.post(
    "/generate",
    response_model=QuizArtifact,
    response_model_by_alias=True,
    summary="Generate a validated quiz from study text",
)
async def generate_quiz(
    request: QuizRequest,
    pipeline: QuizPipeline = Depends(get_pipeline),
) -> QuizArtifact:
    """
    Chunk the text, generate questions per chunk, validate and select.

    The response is always a complete quiz, possibly shorter than requested;
    ``validationReport.passed`` holds the true count.
    """
    logger.info(f"Quiz requested: {len(request.text)} chars, count={request.requested_count}")
    try:
        return await pipeline.generate_quiz_async(request)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@router.post(
    "/hint",
    response_model=QuestionHint,
    summary="Progressive hints for one question",
)
async def question_hint(
    request: HintRequest,
    generator: HintGenerator = Depends(get_hint_generator),
) -> QuestionHint:
    try:
        return generator.generate_hint(request.question, request.language_code)
    except GenerationError as exc:
        logger.warning(f"Hint generation failed: {exc}")
        raise HTTPException(status_code=502, detail=str(exc))
