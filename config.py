"""
Configuration settings for the quizsmith service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # AI Providers
    # ========================================
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Generative AI (Gemini) API key",
    )
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    generation_provider: Literal["gemini", "openai"] = Field(
        default="gemini",
        description="Provider used to author candidate questions",
    )
    ai_model: str = Field(
        default="gemini-2.0-flash",
        description="Model used to author candidate questions and retrieval keywords",
    )
    validation_provider: Literal["gemini", "openai"] = Field(
        default="gemini",
        description="Provider used for the independent semantic validation pass",
    )
    validation_model: str = Field(
        default="gemini-1.5-pro",
        description="Model used for semantic validation (should differ from the generator)",
    )
    llm_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout applied to every model call",
    )

    # ========================================
    # Semantic Embeddings
    # ========================================
    embedding_model: str = Field(
        default="all-MiniLM-L6-v2",
        description="Sentence transformer model for embeddings (384-dim)",
    )
    embedding_dimension: int = Field(
        default=384,
        description="Embedding vector dimension (must match model)",
    )

    # ========================================
    # Semantic Index (Qdrant)
    # ========================================
    qdrant_url: str | None = Field(
        default=None,
        description="Qdrant URL (retrieval disabled when unset)",
    )
    qdrant_api_key: str | None = Field(
        default=None,
        description="Qdrant API key",
    )
    qdrant_collection: str = Field(
        default="study_corpus",
        description="Collection holding reference documents for retrieval",
    )
    retrieval_top_k: int = Field(
        default=5,
        ge=3,
        le=5,
        description="Number of reference documents pulled into the generation context",
    )

    # ========================================
    # Quiz Generation Defaults
    # ========================================
    quiz_default_count: int = Field(
        default=8,
        description="Questions requested when the caller does not say",
    )
    quiz_default_difficulty: Literal["easy", "medium", "hard"] = Field(
        default="medium",
        description="Default overall quiz difficulty",
    )
    quiz_default_types: str = Field(
        default="multiple-choice,true-false,short-answer",
        description="Comma-separated question types allowed by default",
    )
    quiz_default_language: str = Field(
        default="en",
        description="Default BCP47 language code for generated questions",
    )
    quiz_chunk_max_chars: int = Field(
        default=12000,
        description="Maximum characters per source chunk",
    )
    quiz_max_chunks: int = Field(
        default=4,
        description="Chunks actually sent to the generator (bounds latency and cost)",
    )
    quiz_generation_concurrency: int = Field(
        default=4,
        description="Concurrent chunk-level generation calls",
    )
    quiz_shortfall_pass: bool = Field(
        default=True,
        description="Issue one extra generation call when validation leaves a shortfall",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def has_index_configured(self) -> bool:
        """Check if a semantic index is available for retrieval."""
        return bool(self.qdrant_url)

    def get_default_types(self) -> list[str]:
        """Parse the comma-separated default question types."""
        return [t.strip() for t in self.quiz_default_types.split(",") if t.strip()]

    def get_quiz_config(self) -> dict[str, Any]:
        """Get quiz generation configuration as a dictionary."""
        return {
            "default_count": self.quiz_default_count,
            "default_difficulty": self.quiz_default_difficulty,
            "default_types": self.get_default_types(),
            "default_language": self.quiz_default_language,
            "chunk_max_chars": self.quiz_chunk_max_chars,
            "max_chunks": self.quiz_max_chunks,
            "generation_concurrency": self.quiz_generation_concurrency,
            "shortfall_pass": self.quiz_shortfall_pass,
            "generation": {
                "provider": self.generation_provider,
                "model": self.ai_model,
            },
            "validation": {
                "provider": self.validation_provider,
                "model": self.validation_model,
            },
            "retrieval": {
                "enabled": self.has_index_configured(),
                "collection": self.qdrant_collection,
                "top_k": self.retrieval_top_k,
                "embedding_model": self.embedding_model,
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
