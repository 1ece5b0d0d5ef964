"""
Unit tests for the pipeline data model and its configuration.
"""
import pytest
from pydantic import ValidationError

from config import Settings
from src.quiz.pipeline_config import PipelineConfig
from src.quiz.schemas import (
    BloomLevel,
    CandidateQuestion,
    ContentSource,
    Difficulty,
    QuestionType,
    QuizRequest,
    RetrievedContext,
    SourceAttribution,
    ValidationVerdict,
    normalize_question_type,
)


class TestNormalizeQuestionType:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("multiple-choice", QuestionType.MULTIPLE_CHOICE),
            ("MCQ", QuestionType.MULTIPLE_CHOICE),
            ("True/False", QuestionType.TRUE_FALSE),
            ("fill_in_the_blank", QuestionType.FILL_BLANK),
            (" short answer ", QuestionType.SHORT_ANSWER),
        ],
    )
    def test_aliases(self, raw, expected):
        assert normalize_question_type(raw) == expected

    def test_unknown(self):
        with pytest.raises(ValueError):
            normalize_question_type("essay")


class TestCandidateQuestion:
    def test_camel_case_round_trip(self, question_factory):
        question = CandidateQuestion.model_validate(
            question_factory(bloomLevel="Apply", difficultyRating="hard", accessibilityNotes="Plain words.")
        )

        assert question.bloom_level == BloomLevel.APPLY
        assert question.difficulty_rating == Difficulty.HARD
        dumped = question.model_dump(by_alias=True, exclude_none=True)
        assert dumped["questionText"] == "Which organelle produces ATP?"
        assert dumped["accessibilityNotes"] == "Plain words."

    def test_unknown_labels_are_dropped_not_fatal(self, question_factory):
        question = CandidateQuestion.model_validate(question_factory(bloomLevel="easy", difficultyRating="brutal"))

        assert question.bloom_level is None
        assert question.difficulty_rating is None

    def test_answer_list_and_numbers(self, question_factory):
        blanks = CandidateQuestion.model_validate(question_factory(qtype="fill-blank", options=None, answer=["ATP", 2]))
        assert blanks.correct_answer == ["ATP", "2"]

    def test_source_strings_become_attributions(self, question_factory):
        question = CandidateQuestion.model_validate(
            question_factory(sources=["Cell Energy", {"id": 7, "title": "ATP", "score": 0.5}])
        )

        assert question.sources[0] == SourceAttribution(title="Cell Energy")
        assert question.sources[1].id == "7"
        assert question.sources[1].relevance_score == 0.5

    def test_null_source_title_keeps_question(self, question_factory):
        question = CandidateQuestion.model_validate(
            question_factory(sources=[{"id": "doc-1", "title": None}, {"title": "  "}])
        )

        assert [s.title for s in question.sources] == ["Untitled Source", "Untitled Source"]
        assert question.sources[0].id == "doc-1"

    def test_missing_type_is_invalid(self):
        with pytest.raises(ValidationError):
            CandidateQuestion.model_validate({"questionText": "No type given?"})


class TestQuizRequest:
    def test_minimal(self):
        request = QuizRequest(text="Notes")

        assert request.requested_count is None
        assert request.allowed_types is None

    def test_camel_case_input(self):
        request = QuizRequest.model_validate(
            {"text": "Notes", "requestedCount": 3, "allowedTypes": ["true-false"], "contentSource": "note"}
        )

        assert request.requested_count == 3
        assert request.allowed_types == [QuestionType.TRUE_FALSE]
        assert request.content_source == ContentSource.NOTE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"text": ""},
            {"text": " \n\t "},
            {"text": "Notes", "requested_count": 0},
            {"text": "Notes", "allowed_types": []},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            QuizRequest(**kwargs)


class TestSmallTypes:
    def test_empty_context(self):
        assert RetrievedContext().is_empty
        assert not RetrievedContext(text="x").is_empty

    def test_verdict_acceptance(self):
        assert ValidationVerdict(question_id="a").accepted
        assert not ValidationVerdict(question_id="a", semantic_valid=False).accepted
        assert not ValidationVerdict(question_id="a", semantic_issues=["x"]).accepted
        assert ValidationVerdict(question_id="a", structural_issues=["s"], semantic_issues=["x"]).issues == ["s", "x"]


class TestPipelineConfig:
    def test_defaults(self):
        config = PipelineConfig()

        assert config.default_count == 8
        assert config.default_types == (
            QuestionType.MULTIPLE_CHOICE,
            QuestionType.TRUE_FALSE,
            QuestionType.SHORT_ANSWER,
        )
        assert config.chunk_max_chars == 12000
        assert config.max_chunks == 4

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            quiz_default_count=5,
            quiz_default_difficulty="hard",
            quiz_default_types="mcq, fill-blank",
            quiz_max_chunks=2,
            retrieval_top_k=3,
        )
        config = PipelineConfig.from_settings(settings)

        assert config.default_count == 5
        assert config.default_difficulty == Difficulty.HARD
        assert config.default_types == (QuestionType.MULTIPLE_CHOICE, QuestionType.FILL_BLANK)
        assert config.max_chunks == 2
        assert config.retrieval_top_k == 3

    @pytest.mark.parametrize("kwargs", [{"max_chunks": 0}, {"retrieval_top_k": 6}, {"default_types": ()}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            PipelineConfig(**kwargs)
