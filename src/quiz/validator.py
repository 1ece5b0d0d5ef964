"""
Two-pass question validation.

1. Structural checks - deterministic rules, always run, never raise
2. Semantic check - one batched call to an independent model that judges
   factual accuracy against the retrieved context, bias, difficulty,
   distractor quality, phrasing and answer/explanation agreement

The semantic reply is a parallel array aligned by position, so candidates
are submitted and zipped back in the same order. When the semantic model is
unavailable or replies with something unusable, every candidate defaults to
semantically valid and only the structural rules decide.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from loguru import logger

from src.core.outcome import StageOutcome
from src.generation.json_repair import parse_json_array
from src.generation.llm_client import TextModel
from src.generation.prompts import VALIDATION_SYSTEM_PROMPT, get_validation_prompt
from src.quiz.pipeline_config import PipelineConfig
from src.quiz.schemas import CandidateQuestion, QuestionType, RetrievedContext, ValidationVerdict

ISSUE_TEXT_TOO_SHORT = "Question text too short/invalid"
ISSUE_OPTION_COUNT = "MCQ must have exactly 4 options"
ISSUE_OPTIONS_NOT_UNIQUE = "MCQ options must be unique"
ISSUE_EXPLANATION_TOO_LONG = "Explanation too long"


def structural_issues(question: CandidateQuestion, config: Optional[PipelineConfig] = None) -> list[str]:
    """Deterministic rule checks for one candidate."""
    config = config or PipelineConfig()
    issues: list[str] = []

    if len(question.question_text.strip()) < config.min_question_length:
        issues.append(ISSUE_TEXT_TOO_SHORT)

    if question.type == QuestionType.MULTIPLE_CHOICE:
        options = question.options or []
        if len(options) != config.mcq_option_count:
            issues.append(ISSUE_OPTION_COUNT)
        if options:
            distinct = {option.strip().lower() for option in options}
            if len(distinct) != config.mcq_option_count:
                issues.append(ISSUE_OPTIONS_NOT_UNIQUE)

    if question.explanation and len(question.explanation) > config.max_explanation_length:
        issues.append(ISSUE_EXPLANATION_TOO_LONG)

    return issues


@dataclass(frozen=True)
class SemanticCheck:
    """One position of the semantic validator's reply."""
    valid: bool = True
    reasons: list[str] = field(default_factory=list)


def _parse_valid_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"Unrecognised 'valid' flag: {value!r}")


class QuizValidator:
    """
    Merges structural rules with the independent semantic model.

    Example:
        >>> validator = QuizValidator(validation_model)
        >>> verdicts = validator.validate(candidates, context, language="en")
        >>> [v.accepted for v in verdicts]
    """

    def __init__(self, model: Optional[TextModel], config: Optional[PipelineConfig] = None):
        self.model = model
        self.config = config or PipelineConfig()

    def validate(
        self,
        candidates: Sequence[CandidateQuestion],
        context: RetrievedContext,
        language: str = "en",
    ) -> list[ValidationVerdict]:
        """One verdict per candidate, in submission order."""
        if not candidates:
            return []

        semantic = self.check_semantics(candidates, context, language).value

        verdicts = []
        for question, check in zip(candidates, semantic):
            verdict = ValidationVerdict(
                question_id=question.id,
                structural_issues=structural_issues(question, self.config),
                semantic_valid=check.valid,
                semantic_issues=list(check.reasons),
            )
            if not verdict.accepted:
                logger.debug(f"Question {question.id} flagged: {verdict.issues or ['semantic reject']}")
            verdicts.append(verdict)
        return verdicts

    def check_semantics(
        self,
        candidates: Sequence[CandidateQuestion],
        context: RetrievedContext,
        language: str,
    ) -> StageOutcome[list[SemanticCheck]]:
        """
        Batched semantic judgement. Never raises.

        Returns a degraded outcome of all-valid checks when the model is
        missing, the call fails, or the reply does not line up with the input.
        """
        defaults = [SemanticCheck() for _ in candidates]
        if self.model is None:
            return StageOutcome.fallback(defaults, "No semantic validation model")

        payload = [q.model_dump(mode="json", by_alias=True, exclude_none=True) for q in candidates]
        prompt = get_validation_prompt(payload, context.text[: self.config.context_limit], language)

        try:
            raw = self.model.complete(
                prompt,
                system_prompt=VALIDATION_SYSTEM_PROMPT,
                temperature=self.config.validation_temperature,
                structured=True,
            )
            checks = self._parse_checks(raw, expected=len(candidates))
        except Exception as e:
            logger.warning(f"Semantic validation unavailable, using structural checks only: {e}")
            return StageOutcome.fallback(defaults, str(e))

        return StageOutcome.ok(checks)

    @staticmethod
    def _parse_checks(raw: str, expected: int) -> list[SemanticCheck]:
        items = parse_json_array(raw)
        if len(items) != expected:
            raise ValueError(f"Validator returned {len(items)} results for {expected} questions")

        checks = []
        for item in items:
            if not isinstance(item, dict):
                raise ValueError("Validator result is not an object")
            reasons = item.get("reasons") or []
            if not isinstance(reasons, list):
                reasons = [reasons]
            checks.append(
                SemanticCheck(
                    valid=_parse_valid_flag(item.get("valid")),
                    reasons=[str(r) for r in reasons if str(r).strip()],
                )
            )
        return checks
