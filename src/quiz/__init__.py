"""
Quiz module - data model, quota distribution and pipeline defaults.

The validator, selector and pipeline live in their own modules and are
imported from there (``from src.quiz.pipeline import QuizPipeline``) so that
generation code can depend on this package without import cycles.

Question Types:
- multiple-choice: exactly 4 distinct options
- true-false
- fill-blank
- short-answer
"""

from .distribution import distribute_quota
from .pipeline_config import PipelineConfig
from .schemas import (
    CandidateQuestion,
    ContentSource,
    Difficulty,
    QuestionType,
    QuizArtifact,
    QuizRequest,
    RetrievedContext,
    SourceAttribution,
    ValidationReport,
    ValidationVerdict,
)

__all__ = [
    "CandidateQuestion",
    "ContentSource",
    "Difficulty",
    "PipelineConfig",
    "QuestionType",
    "QuizArtifact",
    "QuizRequest",
    "RetrievedContext",
    "SourceAttribution",
    "ValidationReport",
    "ValidationVerdict",
    "distribute_quota",
]
