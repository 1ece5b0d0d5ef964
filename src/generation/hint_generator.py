"""
Progressive hint generation for a single quiz question.

Asks the model for two short nudges plus a final explanation, so a learner
can reveal help step by step without seeing the answer up front.
"""
from __future__ import annotations

from loguru import logger

from src.core.exceptions import GenerationError
from src.generation.json_repair import parse_json_object
from src.generation.llm_client import TextModel
from src.generation.prompts import get_hint_prompt
from src.quiz.schemas import CandidateQuestion, QuestionHint

MAX_HINTS = 2


class HintGenerator:
    """Generates progressive hints using the generation model."""

    def __init__(self, model: TextModel, temperature: float = 0.3):
        self.model = model
        self.temperature = temperature

    def generate_hint(self, question: CandidateQuestion, language: str = "en") -> QuestionHint:
        """
        Build hints for ``question`` in ``language``.

        Raises:
            GenerationError: the call failed or returned unusable output
        """
        payload = question.model_dump(mode="json", by_alias=True, exclude_none=True)
        prompt = get_hint_prompt(payload, language)

        try:
            raw = self.model.complete(prompt, temperature=self.temperature, structured=True)
        except Exception as e:
            raise GenerationError(f"Hint generation failed for {question.id}: {e}") from e

        data = parse_json_object(raw)
        hints = [str(h).strip() for h in data.get("hints") or [] if str(h).strip()]
        explanation = str(data.get("explanation") or "").strip()

        if not hints and not explanation:
            raise GenerationError(f"Model returned no hints for {question.id}")

        logger.debug(f"Generated {len(hints)} hints for {question.id}")
        return QuestionHint(hints=hints[:MAX_HINTS], explanation=explanation)
