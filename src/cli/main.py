"""
Typer CLI for quizsmith.

Commands:
    quizsmith generate SOURCE   - Generate a validated quiz from a text file (or - for stdin)
    quizsmith chunks SOURCE     - Preview chunk boundaries and quota allocation (no model calls)
    quizsmith index FILE...     - Embed reference documents into the semantic index
    quizsmith hint QUESTION     - Progressive hints for one question (JSON file)
    quizsmith serve             - Run the API server
    quizsmith version           - Show version information

Usage:
    quizsmith --help
    quizsmith generate notes.txt --count 5 --difficulty hard
    cat transcript.txt | quizsmith generate - --content-source transcript --no-rag
    quizsmith chunks notes.txt --max-chars 8000 --count 10
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from src.core.exceptions import ConfigurationError, GenerationError
from src.core.logging import configure_logging
from src.processing.chunker import SourceChunker
from src.quiz.distribution import distribute_quota
from src.quiz.schemas import CandidateQuestion, QuizArtifact, QuizRequest

app = typer.Typer(
    help="quizsmith CLI: study text -> validated quiz",
    no_args_is_help=True,
)

console = Console()

EXIT_CONFIG_ERROR = 2


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Generate and validate quizzes from study content."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


# ========================================
# Builders (patched in tests)
# ========================================


def _build_pipeline(use_retrieval: bool):
    from src.quiz.pipeline import QuizPipeline

    return QuizPipeline.from_settings(use_retrieval=use_retrieval)


def _build_hint_generator():
    from src.generation.hint_generator import HintGenerator
    from src.generation.llm_client import build_text_model

    settings = get_settings()
    return HintGenerator(build_text_model(settings.generation_provider, settings.ai_model, settings))


def _build_index():
    """Embedder and semantic index from settings."""
    from src.semantic.embedding_service import EmbeddingService
    from src.semantic.vector_index import QdrantSemanticIndex

    settings = get_settings()
    if not settings.has_index_configured():
        raise ConfigurationError("Semantic index not configured (QDRANT_URL missing)")
    index = QdrantSemanticIndex(
        url=settings.qdrant_url,
        collection_name=settings.qdrant_collection,
        dimension=settings.embedding_dimension,
        api_key=settings.qdrant_api_key,
    )
    return EmbeddingService(), index


def _read_source(source: str) -> str:
    if source == "-":
        return typer.get_text_stream("stdin").read()
    path = Path(source)
    if not path.exists():
        rprint(f"[red]Error: Source not found: {source}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8", errors="replace")


# ========================================
# Commands
# ========================================


@app.command("generate")
def generate(
    source: str = typer.Argument(..., help="Text file with study content, or - for stdin"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of questions (default: 8)"),
    difficulty: Optional[str] = typer.Option(None, "--difficulty", "-d", help="easy, medium or hard"),
    types: Optional[list[str]] = typer.Option(
        None, "--type", "-t", help="Allowed question type (repeatable)"
    ),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Language code (default: en)"),
    content_source: Optional[str] = typer.Option(
        None, "--content-source", help="note, paste, file or transcript"
    ),
    no_rag: bool = typer.Option(False, "--no-rag", help="Skip context retrieval"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the quiz JSON here"),
) -> None:
    """
    Generate a validated quiz from study content.

    Examples:
        quizsmith generate notes.txt --count 5 --type multiple-choice --type true-false
        quizsmith generate lecture.txt -o quiz.json
    """
    text = _read_source(source)

    try:
        request = QuizRequest(
            text=text,
            requested_count=count,
            difficulty=difficulty,
            allowed_types=types or None,
            language_code=language,
            content_source=content_source,
        )
    except ValidationError as e:
        rprint(f"[red]Invalid request:[/red] {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    try:
        pipeline = _build_pipeline(use_retrieval=not no_rag)
        artifact = pipeline.generate_quiz(request)
    except ConfigurationError as e:
        rprint(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    _print_artifact(artifact)

    if output:
        output.write_text(artifact.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        rprint(f"[green]+[/green] Quiz written to {output}")


@app.command("chunks")
def chunks(
    source: str = typer.Argument(..., help="Text file with study content, or - for stdin"),
    max_chars: Optional[int] = typer.Option(None, "--max-chars", help="Chunk size (default: from config)"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Questions to allocate"),
) -> None:
    """Preview chunk boundaries and quota allocation without calling any model."""
    settings = get_settings()
    text = _read_source(source)
    chunker = SourceChunker(max_chars=max_chars or settings.quiz_chunk_max_chars)
    all_chunks = chunker.chunk(text)
    used = all_chunks[: settings.quiz_max_chunks]
    total = count if count is not None else settings.quiz_default_count
    quotas = distribute_quota(total, [max(1, c.weight) for c in used])

    table = Table(title=f"{len(all_chunks)} chunks ({len(text)} chars)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Offset", justify="right")
    table.add_column("Chars", justify="right")
    table.add_column("Quota", justify="right", style="green")
    table.add_column("Ends with", style="cyan")

    for i, chunk in enumerate(all_chunks):
        quota = str(quotas[i]) if i < len(quotas) else "[dim]skipped[/dim]"
        tail = chunk.text[-40:].replace("\n", " ")
        table.add_row(str(i), str(chunk.start_offset), str(chunk.weight), quota, tail)

    console.print(table)
    if len(all_chunks) > len(used):
        rprint(f"[yellow]Only the first {len(used)} chunks are used for generation[/yellow]")


@app.command("index")
def index(
    files: list[Path] = typer.Argument(..., help="Reference documents to index"),
    title: Optional[str] = typer.Option(None, "--title", help="Title for every document (default: file name)"),
) -> None:
    """Embed reference documents and upsert them into the semantic index."""
    from src.semantic.context_retriever import index_documents
    from src.semantic.vector_index import IndexedDocument

    documents = []
    for path in files:
        if not path.exists():
            rprint(f"  [red]-[/red] {path}: not found")
            continue
        documents.append(
            IndexedDocument(
                id=str(path),
                text=path.read_text(encoding="utf-8", errors="replace"),
                title=title or path.stem,
            )
        )

    if not documents:
        rprint("[yellow]No documents to index.[/yellow]")
        raise typer.Exit(1)

    try:
        embedder, semantic_index = _build_index()
    except ConfigurationError as e:
        rprint(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    written = index_documents(embedder, semantic_index, documents)
    rprint(f"[green]+[/green] Indexed {written} documents")


@app.command("hint")
def hint(
    question_file: Path = typer.Argument(..., help="JSON file holding one question"),
    language: str = typer.Option("en", "--language", "-l", help="Language code"),
) -> None:
    """Print progressive hints for one question."""
    if not question_file.exists():
        rprint(f"[red]Error: File not found: {question_file}[/red]")
        raise typer.Exit(1)

    try:
        question = CandidateQuestion.model_validate(json.loads(question_file.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError) as e:
        rprint(f"[red]Invalid question JSON:[/red] {e}")
        raise typer.Exit(1)

    try:
        result = _build_hint_generator().generate_hint(question, language)
    except ConfigurationError as e:
        rprint(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    except GenerationError as e:
        rprint(f"[red]Hint generation failed:[/red] {e}")
        raise typer.Exit(1)

    for i, text in enumerate(result.hints, start=1):
        rprint(f"[bold cyan]Hint {i}:[/bold cyan] {text}")
    if result.explanation:
        rprint(f"[bold]Explanation:[/bold] {result.explanation}")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind host (default: from config)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default: from config)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint("[bold]quizsmith[/bold] v0.1.0")
    rprint("  Content-to-quiz generation and validation")


# ========================================
# Output
# ========================================


def _print_artifact(artifact: QuizArtifact) -> None:
    rprint(f"\n[bold cyan]{artifact.title}[/bold cyan]")

    table = Table(title=f"{artifact.question_count} questions", show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Question")
    table.add_column("Answer", style="green")

    for i, q in enumerate(artifact.questions, start=1):
        answer = ", ".join(q.correct_answer) if isinstance(q.correct_answer, list) else q.correct_answer
        table.add_row(str(i), q.type.value, q.question_text, answer)

    console.print(table)

    report = artifact.validation_report
    rprint(
        f"\n[bold]Validation:[/bold] {report.passed} passed, "
        f"{report.filtered_out} filtered out of {report.total}"
    )
    for issue in report.issues:
        rprint(f"  [yellow]![/yellow] {issue.question_id}: {'; '.join(issue.reasons)}")

    if artifact.retrieved_sources:
        rprint("\n[bold]Sources:[/bold]")
        for s in artifact.retrieved_sources:
            rprint(f"  - {s.title}" + (f" ({s.url})" if s.url else ""))

    logger.debug(f"Printed quiz with {artifact.question_count} questions")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
