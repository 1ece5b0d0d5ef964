"""
Core Module - Shared building blocks.

Components:
- exceptions: QuizPipelineError hierarchy (configuration vs per-chunk failures)
- outcome: StageOutcome result type for stages that degrade instead of raising
- logging: loguru sink setup for the CLI and API
"""

from src.core.exceptions import (
    ConfigurationError,
    GenerationError,
    QuizPipelineError,
    StructuredOutputError,
)
from src.core.outcome import StageOutcome

__all__ = [
    "ConfigurationError",
    "GenerationError",
    "QuizPipelineError",
    "StageOutcome",
    "StructuredOutputError",
]
