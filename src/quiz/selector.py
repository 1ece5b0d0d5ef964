"""
Question selection and validation reporting.

Accepted candidates are kept in generation order and cut to the requested
count. When nothing survives validation, the selector falls back to ranking
the whole pool by structural issue count so the caller always gets a quiz
back from a non-empty pool.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from loguru import logger

from src.quiz.schemas import CandidateQuestion, ValidationIssue, ValidationReport, ValidationVerdict

SEMANTIC_REJECT_REASON = "Rejected by semantic validation"


@dataclass(frozen=True)
class SelectionResult:
    questions: list[CandidateQuestion]
    report: ValidationReport
    accepted_count: int
    used_fallback: bool = False


def select_questions(
    candidates: Sequence[CandidateQuestion],
    verdicts: Sequence[ValidationVerdict],
    requested_count: int,
) -> SelectionResult:
    """
    Pick the final questions and build the validation report.

    Args:
        candidates: Pooled candidates in generation order
        verdicts: One verdict per candidate, aligned by position
        requested_count: Upper bound on questions returned

    Returns:
        SelectionResult whose report counts the whole pool:
        total = pool size, passed = questions returned, filtered_out = the rest
    """
    if len(candidates) != len(verdicts):
        raise ValueError(f"{len(candidates)} candidates but {len(verdicts)} verdicts")

    pairs = list(zip(candidates, verdicts))
    accepted = [q for q, v in pairs if v.accepted]

    used_fallback = False
    if accepted:
        final = accepted[:requested_count]
    elif pairs:
        # sorted() is stable, so ties keep generation order
        ranked = sorted(pairs, key=lambda pair: len(pair[1].structural_issues))
        final = [q for q, _ in ranked[:requested_count]]
        used_fallback = True
        logger.warning(
            f"No candidate passed validation; returning {len(final)} least-flawed of {len(pairs)}"
        )
    else:
        final = []

    issues = [
        ValidationIssue(question_id=q.id, reasons=v.issues or [SEMANTIC_REJECT_REASON])
        for q, v in pairs
        if not v.accepted
    ]
    report = ValidationReport(
        total=len(pairs),
        passed=len(final),
        filtered_out=len(pairs) - len(final),
        issues=issues,
    )
    return SelectionResult(
        questions=final,
        report=report,
        accepted_count=len(accepted),
        used_fallback=used_fallback,
    )
