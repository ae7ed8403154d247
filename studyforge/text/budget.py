"""Generation budget distribution across chunks.

Responsibilities:
- Split a requested item count across chunks so shares sum exactly to the total.
- Pair selected chunks with their budget share as generation units.
"""

from __future__ import annotations

from typing import Sequence

from ..models.datatypes import Chunk, GenerationUnit


def distribute_budget(total: int, chunk_count: int) -> list[int]:
    """Return per-chunk budgets; earlier chunks receive the remainder.

    Raises:
        ValueError: If `total` is negative or `chunk_count` is smaller than one.
    """

    if chunk_count < 1:
        raise ValueError("`chunk_count` must be at least 1.")
    if total < 0:
        raise ValueError("`total` must be non-negative.")
    if chunk_count == 1:
        return [total]

    base, remainder = divmod(total, chunk_count)
    return [base + (1 if index < remainder else 0) for index in range(chunk_count)]


def build_generation_units(chunks: Sequence[Chunk], total: int) -> list[GenerationUnit]:
    """Pair each chunk with its budget share in document order."""

    if not chunks:
        return []
    budgets = distribute_budget(total, len(chunks))
    return [
        GenerationUnit(chunk=chunk, budget=budget)
        for chunk, budget in zip(chunks, budgets)
    ]
