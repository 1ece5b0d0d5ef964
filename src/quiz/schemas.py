"""
Typed data model for the content-to-quiz pipeline.

Model output never crosses the Question Generator boundary as a raw dict:
it is coerced into CandidateQuestion here, and anything that cannot be
coerced is dropped. All wire-facing models serialize with camelCase aliases
(questionText, correctAnswer, validationReport, ...) and accept either
camelCase or snake_case on input.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class QuestionType(str, Enum):
    """Question formats the generator may author."""
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    FILL_BLANK = "fill-blank"
    SHORT_ANSWER = "short-answer"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class BloomLevel(str, Enum):
    """Bloom's taxonomy levels."""
    REMEMBER = "remember"
    UNDERSTAND = "understand"
    APPLY = "apply"
    ANALYZE = "analyze"
    EVALUATE = "evaluate"
    CREATE = "create"


class ContentSource(str, Enum):
    """Where the study text came from."""
    NOTE = "note"
    PASTE = "paste"
    FILE = "file"
    TRANSCRIPT = "transcript"


# Spellings models commonly use for the canonical types
QUESTION_TYPE_ALIASES = {
    "multiple-choice": QuestionType.MULTIPLE_CHOICE,
    "multiple choice": QuestionType.MULTIPLE_CHOICE,
    "multiple_choice": QuestionType.MULTIPLE_CHOICE,
    "mcq": QuestionType.MULTIPLE_CHOICE,
    "true-false": QuestionType.TRUE_FALSE,
    "true/false": QuestionType.TRUE_FALSE,
    "true_false": QuestionType.TRUE_FALSE,
    "truefalse": QuestionType.TRUE_FALSE,
    "true false": QuestionType.TRUE_FALSE,
    "fill-blank": QuestionType.FILL_BLANK,
    "fill-in-the-blank": QuestionType.FILL_BLANK,
    "fill_in_the_blank": QuestionType.FILL_BLANK,
    "fill in the blank": QuestionType.FILL_BLANK,
    "cloze": QuestionType.FILL_BLANK,
    "short-answer": QuestionType.SHORT_ANSWER,
    "short answer": QuestionType.SHORT_ANSWER,
    "short_answer": QuestionType.SHORT_ANSWER,
}


def normalize_question_type(value: Any) -> QuestionType:
    """Map a model-supplied type string onto the canonical enum."""
    if isinstance(value, QuestionType):
        return value
    key = str(value or "").strip().lower()
    if key not in QUESTION_TYPE_ALIASES:
        raise ValueError(f"Unsupported question type: {value!r}")
    return QUESTION_TYPE_ALIASES[key]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# =============================================================================
# Sources & Questions
# =============================================================================


class SourceAttribution(_WireModel):
    """A reference document that grounded a question or a quiz."""

    id: str = ""
    title: str = "Untitled Source"
    url: Optional[str] = None
    relevance_score: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("relevanceScore", "relevance_score", "score"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            return "Untitled Source"
        return str(value)


class CandidateQuestion(_WireModel):
    """A question authored by the generator, before or after validation."""

    id: str = ""
    type: QuestionType
    question_text: str = ""
    options: Optional[list[str]] = None
    correct_answer: Union[str, list[str]] = ""
    explanation: Optional[str] = None
    bloom_level: Optional[BloomLevel] = None
    sources: list[SourceAttribution] = Field(default_factory=list)
    language: str = "en"
    accessibility_notes: Optional[str] = None
    difficulty_rating: Optional[Difficulty] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> QuestionType:
        return normalize_question_type(value)

    @field_validator("id", "question_text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> Optional[list[str]]:
        if value is None:
            return None
        if not isinstance(value, (list, tuple)):
            raise ValueError("options must be a list")
        return [str(option) for option in value]

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _coerce_answer(cls, value: Any) -> Union[str, list[str]]:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return [str(part) for part in value]
        if isinstance(value, bool):
            return "True" if value else "False"
        return str(value)

    @field_validator("bloom_level", "difficulty_rating", mode="before")
    @classmethod
    def _lenient_enum(cls, value: Any, info: ValidationInfo) -> Any:
        # Unknown labels are dropped rather than failing the whole question
        if value is None:
            return None
        enum_type = BloomLevel if info.field_name == "bloom_level" else Difficulty
        label = str(value).strip().lower()
        if label in {member.value for member in enum_type}:
            return label
        return None

    @field_validator("sources", mode="before")
    @classmethod
    def _coerce_sources(cls, value: Any) -> list[Any]:
        if not value:
            return []
        if not isinstance(value, (list, tuple)):
            return []
        normalized = []
        for source in value:
            if isinstance(source, str):
                normalized.append({"title": source})
            elif isinstance(source, dict):
                normalized.append(source)
        return normalized


# =============================================================================
# Retrieval & Validation
# =============================================================================


@dataclass(frozen=True)
class RetrievedContext:
    """Context pulled from the semantic index. Empty when retrieval is off or failed."""

    text: str = ""
    sources: list[SourceAttribution] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.sources


@dataclass(frozen=True)
class ValidationVerdict:
    """
    Outcome of both validation passes for one candidate.

    Structural issues come from deterministic rules; the semantic fields come
    from the independent model and default to valid/empty when it is unavailable.
    """

    question_id: str
    structural_issues: list[str] = field(default_factory=list)
    semantic_valid: bool = True
    semantic_issues: list[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.structural_issues and not self.semantic_issues and self.semantic_valid

    @property
    def issues(self) -> list[str]:
        """Structural issues followed by semantic issues."""
        return [*self.structural_issues, *self.semantic_issues]


class ValidationIssue(_WireModel):
    """A rejected question and the merged reasons it was rejected."""

    question_id: str = Field(
        validation_alias=AliasChoices("id", "questionId", "question_id"),
        serialization_alias="id",
    )
    reasons: list[str] = Field(default_factory=list)


class ValidationReport(_WireModel):
    total: int = 0
    passed: int = 0
    filtered_out: int = 0
    issues: list[ValidationIssue] = Field(default_factory=list)


# =============================================================================
# Request & Artifact
# =============================================================================


class QuizRequest(_WireModel):
    """
    Caller input for a pipeline run.

    Only ``text`` is required; unset fields fall back to the PipelineConfig
    defaults when the run starts.
    """

    text: str = Field(min_length=1)
    requested_count: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("requestedCount", "requested_count", "numberOfQuestions"),
    )
    difficulty: Optional[Difficulty] = None
    allowed_types: Optional[list[QuestionType]] = Field(
        default=None,
        min_length=1,
        validation_alias=AliasChoices("allowedTypes", "allowed_types", "questionTypes"),
    )
    language_code: Optional[str] = None
    content_source: Optional[ContentSource] = None

    @field_validator("text")
    @classmethod
    def _require_content(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must contain non-whitespace content")
        return value

    @field_validator("allowed_types", mode="before")
    @classmethod
    def _normalize_types(cls, value: Any) -> Any:
        if value is None:
            return None
        return [normalize_question_type(v) for v in value]


class QuizArtifact(_WireModel):
    """The pipeline's sole output. Persisted by the caller."""

    title: str
    difficulty: Difficulty
    question_count: int
    questions: list[CandidateQuestion] = Field(default_factory=list)
    language: str = "en"
    content_source: ContentSource = ContentSource.PASTE
    validation_report: ValidationReport = Field(default_factory=ValidationReport)
    retrieved_sources: list[SourceAttribution] = Field(default_factory=list)


class QuestionHint(_WireModel):
    """Progressive hints for a single question."""

    hints: list[str] = Field(default_factory=list)
    explanation: str = ""
