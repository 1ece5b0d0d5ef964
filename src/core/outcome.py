"""
Result type for best-effort pipeline stages.

Retrieval and semantic validation are enhancements, not gates. Instead of
raising, they hand back a StageOutcome whose value is always usable: either
the real result or the stage's documented degraded default.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """Value produced by a degradable stage plus how it was produced."""

    value: T
    degraded: bool = False
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "StageOutcome[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, error: str) -> "StageOutcome[T]":
        """Degraded result carrying the reason the real stage failed."""
        return cls(value=value, degraded=True, error=error)
