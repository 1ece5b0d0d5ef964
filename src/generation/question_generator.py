"""
Question Generator - authors candidate questions for one chunk.

Pipeline per call:
1. Build a structured-output prompt (count, type mix, output shape, grounding rules)
2. Call the generation model once
3. Parse the response through the repair chain
4. Coerce each item into a CandidateQuestion, dropping anything that will not coerce
5. Assign synthetic ids where the model left them out

A model failure or unrepairable output raises GenerationError for this
chunk only; the orchestrator decides what to do with it.
"""
from __future__ import annotations

import uuid
from typing import Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from src.core.exceptions import GenerationError, StructuredOutputError
from src.generation.json_repair import parse_json_array
from src.generation.llm_client import TextModel
from src.generation.prompts import get_generation_prompt, get_generation_system_prompt
from src.quiz.pipeline_config import PipelineConfig
from src.quiz.schemas import (
    CandidateQuestion,
    Difficulty,
    QuestionType,
    RetrievedContext,
    SourceAttribution,
)


def new_question_id() -> str:
    """Synthetic id for a candidate; model-supplied ids are never trusted to be unique."""
    return f"q-{uuid.uuid4().hex[:12]}"


class QuestionGenerator:
    """
    Drives the generation model for one chunk at a time.

    Example:
        >>> generator = QuestionGenerator(model)
        >>> questions = generator.generate(chunk.text, context, quota=3,
        ...     difficulty=Difficulty.MEDIUM, allowed_types=[QuestionType.TRUE_FALSE],
        ...     language="en")
    """

    def __init__(self, model: TextModel, config: Optional[PipelineConfig] = None):
        self.model = model
        self.config = config or PipelineConfig()

    def generate(
        self,
        chunk_text: str,
        context: RetrievedContext,
        quota: int,
        difficulty: Difficulty,
        allowed_types: Sequence[QuestionType],
        language: str,
        chunk_index: Optional[int] = None,
        content_limit: Optional[int] = None,
    ) -> list[CandidateQuestion]:
        """
        Author up to ``quota`` candidate questions grounded in ``chunk_text``.

        Returns:
            Parsed candidates (possibly fewer than requested). Empty without
            calling the model when ``quota`` is 0. ``content_limit`` overrides the
            study content cap for this call.

        Raises:
            GenerationError: the call failed or its output could not be repaired
        """
        if quota <= 0:
            return []

        label = f"chunk {chunk_index}" if chunk_index is not None else "source"
        prompt = get_generation_prompt(
            study_content=chunk_text[: content_limit or self.config.study_content_limit],
            context=context.text[: self.config.context_limit],
            source_titles=[s.title for s in context.sources],
            count=quota,
            difficulty=difficulty.value,
            types=[t.value for t in allowed_types],
            language=language,
        )

        try:
            raw = self.model.complete(
                prompt,
                system_prompt=get_generation_system_prompt(language),
                temperature=self.config.generation_temperature,
                structured=True,
            )
        except Exception as e:
            raise GenerationError(
                f"Generation call failed for {label}: {e}",
                chunk_index=chunk_index,
            ) from e

        try:
            items = parse_json_array(raw)
        except StructuredOutputError as e:
            e.chunk_index = chunk_index
            raise

        questions = self._coerce_items(items, context.sources, language, label)

        if len(questions) > quota:
            logger.debug(f"{label}: model returned {len(questions)} questions for quota {quota}, truncating")
            questions = questions[:quota]
        elif len(questions) < quota:
            logger.info(f"{label}: model returned {len(questions)}/{quota} usable questions")

        return questions

    def _coerce_items(
        self,
        items: list,
        retrieved_sources: list[SourceAttribution],
        language: str,
        label: str,
    ) -> list[CandidateQuestion]:
        """Turn raw array items into typed candidates."""
        by_title = {s.title.strip().lower(): s for s in retrieved_sources}
        questions: list[CandidateQuestion] = []

        for position, item in enumerate(items):
            if not isinstance(item, dict):
                logger.debug(f"{label}: dropping non-object item at position {position}")
                continue

            payload = dict(item)
            if not str(payload.get("id") or "").strip():
                payload["id"] = new_question_id()
            if not payload.get("language"):
                payload["language"] = language

            try:
                question = CandidateQuestion.model_validate(payload)
            except ValidationError as e:
                logger.debug(f"{label}: dropping malformed item at position {position}: {e.errors()[0]['msg']}")
                continue

            if question.sources and by_title:
                resolved = [by_title.get(s.title.strip().lower(), s) for s in question.sources]
                question = question.model_copy(update={"sources": resolved})

            questions.append(question)

        return questions
