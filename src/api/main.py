"""
FastAPI application for quizsmith.

Provides REST API for:
- Quiz generation from study text
- Progressive question hints
- Service health and configuration
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import get_settings
from src.core.logging import configure_logging

settings = get_settings()


def _provider_configured(provider: str) -> bool:
    if provider == "gemini":
        return bool(settings.gemini_api_key)
    if provider == "openai":
        return bool(settings.openai_api_key)
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging(settings.log_level, settings.log_file)
    logger.info("Starting quizsmith service...")
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down quizsmith service...")
    quiz_router.close_shared_instances()


app = FastAPI(
    title="Quizsmith",
    description="""
    Content-to-quiz generation and validation service.

    ## Pipeline

    ```
    Study text
        ↓ chunk + distribute quota, retrieve context
    Per-chunk generation
        ↓ pooled candidates
    Structural + semantic validation
        ↓
    Selected quiz + validation report
    ```
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "quizsmith",
        "version": "0.1.0",
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Configuration status of the models and the semantic index."""
    generation_ok = _provider_configured(settings.generation_provider)
    validation_ok = _provider_configured(settings.validation_provider)

    components = {
        "generation_model": "configured" if generation_ok else "not_configured",
        "validation_model": "configured" if validation_ok else "not_configured",
        "semantic_index": "configured" if settings.has_index_configured() else "not_configured",
    }

    # Retrieval is optional; both models are not
    overall_status = "healthy" if generation_ok and validation_ok else "unhealthy"

    return {
        "status": overall_status,
        "timestamp": datetime.utcnow().isoformat(),
        "components": components,
    }


@app.get("/config", tags=["Health"])
def get_config() -> dict[str, Any]:
    """Get current configuration (non-sensitive)."""
    return {
        "ai": {
            "gemini_configured": bool(settings.gemini_api_key),
            "openai_configured": bool(settings.openai_api_key),
            "timeout_seconds": settings.llm_timeout_seconds,
        },
        "quiz": settings.get_quiz_config(),
    }


# ========================================
# Import and mount routers
# ========================================

from src.api.routers import quiz_router

app.include_router(quiz_router.router, prefix="/api/quiz", tags=["Quiz"])
