"""
Proportional quota allocation across chunks.

Each chunk's share is floor(total * weight / sum(weights)). The floors can
only undershoot, so the remainder is handed out one question at a time,
cycling through chunks in order until the sum is exact. The remainder always
favors earlier chunks; callers and tests rely on that tie-break.
"""
from __future__ import annotations

from typing import Sequence


def distribute_quota(total: int, weights: Sequence[int]) -> list[int]:
    """
    Split ``total`` questions across chunks proportionally to their weights.

    Args:
        total: Number of questions to allocate (must be >= 0)
        weights: One non-negative weight per chunk (character length)

    Returns:
        One non-negative count per weight, summing exactly to ``total``.
        Empty when ``weights`` is empty.

    Example:
        >>> distribute_quota(8, [12000, 12000, 6000])
        [4, 3, 1]
    """
    if total < 0:
        raise ValueError(f"total must be non-negative, got {total}")
    if not weights:
        return []
    if any(w < 0 for w in weights):
        raise ValueError("weights must be non-negative")

    parts = len(weights)
    weight_sum = sum(weights)

    if weight_sum == 0:
        quotas = [0] * parts
    else:
        quotas = [(total * w) // weight_sum for w in weights]

    assigned = sum(quotas)
    index = 0
    while assigned < total:
        quotas[index % parts] += 1
        assigned += 1
        index += 1

    return quotas
