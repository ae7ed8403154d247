"""Near-duplicate detection for generated items.

Responsibilities:
- Score two texts by token-set Jaccard similarity.
- Greedily drop items too similar to an already accepted item.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from ..models.content import GeneratedItem

ItemT = TypeVar("ItemT", bound=GeneratedItem)

DEFAULT_SIMILARITY_THRESHOLD = 0.7


def _tokens(text: str) -> frozenset[str]:
    return frozenset(text.lower().split())


def _token_similarity(first: frozenset[str], second: frozenset[str]) -> float:
    union = first | second
    if not union:
        return 1.0
    return len(first & second) / len(union)


def jaccard_similarity(first: str, second: str) -> float:
    """Return `|A & B| / |A | B|` over lowercased whitespace tokens.

    Two texts without tokens are identical (`1.0`); one empty text against a
    non-empty one scores `0.0`.
    """

    return _token_similarity(_tokens(first), _tokens(second))


class SimilarityDeduplicator:
    """Order-preserving greedy deduplicator over `similarity_text`."""

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("`threshold` must be within 0.0..1.0.")
        self.threshold = threshold

    def dedupe(self, items: Sequence[ItemT], threshold: float | None = None) -> list[ItemT]:
        """Keep each item only if it is strictly below `threshold` against every kept item."""

        limit = self.threshold if threshold is None else threshold
        accepted: list[ItemT] = []
        accepted_tokens: list[frozenset[str]] = []
        for item in items:
            tokens = _tokens(item.similarity_text)
            if all(_token_similarity(tokens, kept) < limit for kept in accepted_tokens):
                accepted.append(item)
                accepted_tokens.append(tokens)
        return accepted
