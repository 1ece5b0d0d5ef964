"""
LLM Prompts for Quiz Generation and Validation.

Contains prompts for:
- Question authoring (per chunk and for the shortfall pass)
- Retrieval keyword extraction
- Independent semantic validation
- Progressive hints

Each authoring prompt states:
1. How many questions and which types to mix
2. The exact output shape (JSON array, camelCase keys, 4 options for MCQ)
3. Grounding rules (chunk text and retrieved context only, cite by title)
"""
from __future__ import annotations

import json
from typing import Sequence

# =============================================================================
# Question Authoring
# =============================================================================

GENERATION_SYSTEM_PROMPT = """You are an expert assessment designer.
Generate accessible, plain-language questions in {language}.
Avoid jargon unless necessary; if used, define it briefly."""

GENERATION_PROMPT = """Create {count} quiz questions across Bloom's taxonomy (from remember to analyze), matching overall difficulty "{difficulty}".
Question types allowed: {types}. Use a mix. For multiple-choice, include exactly 4 options with plausible, non-overlapping distractors.

Ground your questions ONLY in the given STUDY CONTENT and RAG CONTEXT. Do not use outside knowledge.
Cite sources you used by their titles from the RAG SOURCES list.

Output a strict JSON array of question objects with keys:
- id (string, unique)
- type (one of {type_choices})
- questionText (string, plain language, concise)
- options (array of exactly 4 strings) only if type is multiple-choice
- correctAnswer (string, or array of strings for multiple blanks)
- explanation (string, 1-2 sentences)
- bloomLevel (remember|understand|apply|analyze|evaluate|create)
- sources (array of {{"id": string, "title": string}}) referencing RAG SOURCES by title
- language (BCP47 code, e.g. {language})
- accessibilityNotes (string explaining simplifications)

STUDY CONTENT:
\"\"\"
{study_content}
\"\"\"

RAG CONTEXT:
\"\"\"
{context}
\"\"\"

RAG SOURCES: {source_titles}

Return ONLY the JSON array."""


def get_generation_system_prompt(language: str) -> str:
    return GENERATION_SYSTEM_PROMPT.format(language=language)


def get_generation_prompt(
    study_content: str,
    context: str,
    source_titles: Sequence[str],
    count: int,
    difficulty: str,
    types: Sequence[str],
    language: str,
) -> str:
    """Build the authoring prompt for one chunk (callers truncate inputs)."""
    return GENERATION_PROMPT.format(
        count=count,
        difficulty=difficulty,
        types=", ".join(types),
        type_choices=" | ".join(types),
        language=language,
        study_content=study_content,
        context=context,
        source_titles=", ".join(source_titles) if source_titles else "(none)",
    )


# =============================================================================
# Retrieval Keywords
# =============================================================================

KEYWORD_PROMPT = """Extract 5-8 concise keywords from the following study content for retrieval.
Output them as a single comma-separated line and nothing else.

{study_content}"""


def get_keyword_prompt(study_content: str) -> str:
    return KEYWORD_PROMPT.format(study_content=study_content)


# =============================================================================
# Semantic Validation
# =============================================================================

VALIDATION_SYSTEM_PROMPT = """You are an expert Quality Assurance reviewer for quiz questions.
You judge questions strictly against the supplied context and never rewrite them."""

VALIDATION_PROMPT = """You are validating a quiz. For each question, in the SAME ORDER as given, return an object {{"valid": boolean, "reasons": string[]}}.

Criteria:
- factual correctness against CONTEXT (when CONTEXT is empty, judge internal consistency only)
- no harmful or biased content
- appropriate difficulty
- multiple-choice distractors plausible and non-trivial
- clear plain-language phrasing in {language}
- answer and explanation agree

If a question is invalid, list the reasons succinctly. Valid questions have an empty reasons list.

CONTEXT (authoritative, use only this to fact-check):
\"\"\"
{context}
\"\"\"

QUESTIONS JSON ({count} items):
{questions_json}

Return ONLY a JSON array with exactly {count} items, like: [{{"valid": true, "reasons": []}}, ...]"""


def get_validation_prompt(questions: list[dict], context: str, language: str) -> str:
    return VALIDATION_PROMPT.format(
        language=language,
        context=context,
        count=len(questions),
        questions_json=json.dumps(questions, ensure_ascii=False),
    )


# =============================================================================
# Hints
# =============================================================================

HINT_PROMPT = """Provide progressive disclosure hints in {language} for the quiz question below.
Return JSON with keys: {{"hints": ["small nudge", "bigger clue"], "explanation": "final explanation"}}.
Keep hints short and avoid revealing the full answer until the explanation.

{question_json}"""


def get_hint_prompt(question: dict, language: str, limit: int = 4000) -> str:
    return HINT_PROMPT.format(
        language=language,
        question_json=json.dumps(question, ensure_ascii=False)[:limit],
    )
