"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
Model-backed builders are patched with fakes, so nothing leaves the process.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""
import json

import pytest
from typer.testing import CliRunner

from src.cli import main as cli
from src.core.exceptions import ConfigurationError
from src.generation.hint_generator import HintGenerator
from src.quiz.pipeline import QuizPipeline
from src.semantic.vector_index import InMemorySemanticIndex

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


@pytest.fixture
def fake_pipeline(monkeypatch, fake_model_factory, question_factory, valid_semantic_reply):
    items = [question_factory(qid=f"q{i}", text=f"Smoke question {i}?") for i in range(3)]
    generation = fake_model_factory(default=json.dumps(items))
    validation = fake_model_factory(default=valid_semantic_reply(3))
    pipeline = QuizPipeline(generation, validation)
    built = {}

    def _build(use_retrieval):
        built["use_retrieval"] = use_retrieval
        return pipeline

    monkeypatch.setattr(cli, "_build_pipeline", _build)
    return built


@pytest.fixture
def notes_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Mitochondria produce ATP. Ribosomes build proteins.", encoding="utf-8")
    return path


class TestCLIHelp:
    def test_help_lists_commands(self):
        result = runner.invoke(cli.app, ["--help"])

        assert result.exit_code == 0
        for command in ("generate", "chunks", "index", "hint", "serve"):
            assert command in result.stdout

    def test_version(self):
        result = runner.invoke(cli.app, ["version"])

        assert result.exit_code == 0
        assert "quizsmith" in result.stdout


class TestGenerateCommand:
    def test_generate_writes_artifact(self, fake_pipeline, notes_file, tmp_path):
        output = tmp_path / "quiz.json"
        result = runner.invoke(
            cli.app,
            ["generate", str(notes_file), "--count", "3", "--difficulty", "easy", "--output", str(output)],
        )

        assert result.exit_code == 0, result.stdout
        assert "3 passed" in result.stdout
        artifact = json.loads(output.read_text(encoding="utf-8"))
        assert artifact["questionCount"] == 3
        assert artifact["difficulty"] == "easy"
        assert "validationReport" in artifact
        assert fake_pipeline["use_retrieval"] is True

    def test_generate_from_stdin_without_rag(self, fake_pipeline):
        result = runner.invoke(
            cli.app,
            ["generate", "-", "--count", "2", "--no-rag", "--content-source", "transcript"],
            input="Transcript of a lecture on cells.",
        )

        assert result.exit_code == 0, result.stdout
        assert fake_pipeline["use_retrieval"] is False

    def test_generate_rejects_unknown_type(self, fake_pipeline, notes_file):
        result = runner.invoke(cli.app, ["generate", str(notes_file), "--type", "essay"])

        assert result.exit_code == 1
        assert "Invalid request" in result.stdout

    def test_generate_rejects_blank_source(self, fake_pipeline, tmp_path):
        blank = tmp_path / "blank.txt"
        blank.write_text("   \n", encoding="utf-8")

        assert runner.invoke(cli.app, ["generate", str(blank)]).exit_code == 1

    def test_generate_missing_file(self, fake_pipeline, tmp_path):
        assert runner.invoke(cli.app, ["generate", str(tmp_path / "missing.txt")]).exit_code == 1

    def test_generate_configuration_error_exit_code(self, monkeypatch, notes_file):
        def _raise(use_retrieval):
            raise ConfigurationError("Gemini not configured (GEMINI_API_KEY missing)")

        monkeypatch.setattr(cli, "_build_pipeline", _raise)
        result = runner.invoke(cli.app, ["generate", str(notes_file)])

        assert result.exit_code == cli.EXIT_CONFIG_ERROR
        assert "Configuration error" in result.stdout


class TestChunksCommand:
    def test_chunks_preview(self, tmp_path):
        source = tmp_path / "long.txt"
        source.write_text("word " * 6000, encoding="utf-8")

        result = runner.invoke(cli.app, ["chunks", str(source), "--max-chars", "12000", "--count", "8"])

        assert result.exit_code == 0, result.stdout
        assert "3 chunks" in result.stdout


class TestIndexCommand:
    def test_index_documents(self, monkeypatch, fake_embedder, tmp_path):
        index = InMemorySemanticIndex()
        monkeypatch.setattr(cli, "_build_index", lambda: (fake_embedder, index))
        first = tmp_path / "cells.txt"
        first.write_text("Cells are the unit of life.", encoding="utf-8")
        second = tmp_path / "atp.txt"
        second.write_text("ATP stores energy.", encoding="utf-8")

        result = runner.invoke(cli.app, ["index", str(first), str(second)])

        assert result.exit_code == 0, result.stdout
        assert "Indexed 2 documents" in result.stdout
        assert len(index) == 2

    def test_index_without_configuration(self, monkeypatch, tmp_path):
        def _raise():
            raise ConfigurationError("Semantic index not configured (QDRANT_URL missing)")

        monkeypatch.setattr(cli, "_build_index", _raise)
        doc = tmp_path / "doc.txt"
        doc.write_text("text", encoding="utf-8")

        assert runner.invoke(cli.app, ["index", str(doc)]).exit_code == cli.EXIT_CONFIG_ERROR


class TestHintCommand:
    def test_hint_prints_hints(self, monkeypatch, fake_model_factory, question_factory, tmp_path):
        model = fake_model_factory([json.dumps({"hints": ["Energy.", "Organelle."], "explanation": "Mitochondria."})])
        monkeypatch.setattr(cli, "_build_hint_generator", lambda: HintGenerator(model))
        question_file = tmp_path / "question.json"
        question_file.write_text(json.dumps(question_factory()), encoding="utf-8")

        result = runner.invoke(cli.app, ["hint", str(question_file), "--language", "en"])

        assert result.exit_code == 0, result.stdout
        assert "Hint 1" in result.stdout
        assert "Mitochondria." in result.stdout

    def test_hint_rejects_invalid_json(self, tmp_path):
        question_file = tmp_path / "question.json"
        question_file.write_text("{not json", encoding="utf-8")

        assert runner.invoke(cli.app, ["hint", str(question_file)]).exit_code == 1
