"""API routers for quizsmith."""

from src.api.routers import quiz_router

__all__ = [
    "quiz_router",
]
