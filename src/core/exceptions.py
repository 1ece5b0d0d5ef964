"""
Exception hierarchy for the quiz generation pipeline.

Only configuration problems are fatal to a pipeline run. Generation errors
are scoped to a single chunk (or the shortfall pass) and are recovered by the
orchestrator; retrieval and semantic validation never raise at all.
"""
from __future__ import annotations

from typing import Optional


class QuizPipelineError(Exception):
    """Base class for pipeline errors."""
    pass


class ConfigurationError(QuizPipelineError):
    """A required external dependency (generation or validation model) is unavailable."""
    pass


class GenerationError(QuizPipelineError):
    """A generation call failed or its output could not be turned into questions."""

    def __init__(
        self,
        message: str,
        chunk_index: Optional[int] = None,
        raw_excerpt: Optional[str] = None,
    ):
        super().__init__(message)
        self.chunk_index = chunk_index
        self.raw_excerpt = raw_excerpt


class StructuredOutputError(GenerationError):
    """Model output could not be repaired into a JSON array."""
    pass
