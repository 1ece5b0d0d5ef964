"""
Pipeline defaults in one place.

Every tunable the pipeline uses (chunk size, caps, default request values,
prompt truncation limits, temperatures) lives on PipelineConfig, which is
passed into QuizPipeline explicitly. ``from_settings`` maps the environment
backed Settings onto it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config import Settings, get_settings
from src.quiz.schemas import ContentSource, Difficulty, QuestionType, normalize_question_type

DEFAULT_TYPES = (
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.TRUE_FALSE,
    QuestionType.SHORT_ANSWER,
)


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit configuration for one QuizPipeline."""

    # Request defaults
    default_count: int = 8
    default_difficulty: Difficulty = Difficulty.MEDIUM
    default_types: tuple[QuestionType, ...] = DEFAULT_TYPES
    default_language: str = "en"
    default_content_source: ContentSource = ContentSource.PASTE

    # Chunking & fan-out
    chunk_max_chars: int = 12000
    sentence_cut_ratio: float = 0.6
    max_chunks: int = 4
    generation_concurrency: int = 4

    # Prompt truncation limits (characters)
    study_content_limit: int = 15000
    context_limit: int = 15000
    keyword_seed_limit: int = 8000
    shortfall_source_limit: int = 48000

    # Retrieval
    retrieval_top_k: int = 5
    context_delimiter: str = "\n\n---\n\n"

    # Structural rules
    min_question_length: int = 5
    max_explanation_length: int = 400
    mcq_option_count: int = 4

    # Sampling
    generation_temperature: float = 0.3
    keyword_temperature: float = 0.2
    validation_temperature: float = 0.1

    enable_shortfall_pass: bool = True

    def __post_init__(self):
        if self.max_chunks < 1:
            raise ValueError("max_chunks must be at least 1")
        if not 3 <= self.retrieval_top_k <= 5:
            raise ValueError("retrieval_top_k must be between 3 and 5")
        if not self.default_types:
            raise ValueError("default_types must not be empty")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PipelineConfig":
        """Build a config from environment-backed settings."""
        settings = settings or get_settings()
        return cls(
            default_count=settings.quiz_default_count,
            default_difficulty=Difficulty(settings.quiz_default_difficulty),
            default_types=tuple(normalize_question_type(t) for t in settings.get_default_types()),
            default_language=settings.quiz_default_language,
            chunk_max_chars=settings.quiz_chunk_max_chars,
            max_chunks=settings.quiz_max_chunks,
            generation_concurrency=settings.quiz_generation_concurrency,
            retrieval_top_k=settings.retrieval_top_k,
            enable_shortfall_pass=settings.quiz_shortfall_pass,
        )
