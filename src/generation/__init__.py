"""
LLM-backed question generation.

Pipeline pieces:
1. Model adapters (Gemini, OpenAI) behind a single TextModel contract
2. Prompts for authoring, keyword extraction, validation and hints
3. Repair chain for semi-structured model output
4. QuestionGenerator (per chunk) and HintGenerator (per question)

Usage:
    from src.generation import QuestionGenerator, build_text_model

    model = build_text_model("gemini", "gemini-2.0-flash")
    questions = QuestionGenerator(model).generate(...)
"""

from .hint_generator import HintGenerator
from .json_repair import parse_json_array, parse_json_object
from .llm_client import (
    GeminiTextModel,
    OpenAITextModel,
    TextModel,
    build_text_model,
)
from .question_generator import QuestionGenerator, new_question_id

__all__ = [
    "TextModel",
    "GeminiTextModel",
    "OpenAITextModel",
    "build_text_model",
    "parse_json_array",
    "parse_json_object",
    "QuestionGenerator",
    "HintGenerator",
    "new_question_id",
]
