"""Core datatypes shared across Studyforge modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Provide explicit typing for reproducibility and serialization.

Key types:
- `SegmentationOptions`, `Chunk`, `SegmentationResult`, `GenerationUnit`,
  `GenerationOutcome`, `CacheEntry`, `RateLimitDecision`, `GenerationRequest`,
  `NarrationRequest`, and `PipelineResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping

from .content import ContentKind, GeneratedContent, GeneratedItem


@dataclass(frozen=True, slots=True)
class SegmentationOptions:
    """Bounds for splitting normalized text into chunks.

    Attributes:
        max_chunk_size: Upper bound on characters per chunk.
        overlap_size: Characters of trailing context carried into the next chunk.
        min_chunk_size: Chunks shorter than this are dropped rather than emitted.
        split_search_window: Characters searched backward from the candidate end
            for a paragraph, sentence, or word boundary.
    """

    max_chunk_size: int = 8000
    overlap_size: int = 500
    min_chunk_size: int = 1000
    split_search_window: int = 200

    def __post_init__(self) -> None:
        if self.max_chunk_size <= 0:
            raise ValueError("`max_chunk_size` must be a positive integer.")
        if not 0 <= self.overlap_size < self.max_chunk_size:
            raise ValueError("`overlap_size` must satisfy 0 <= overlap_size < max_chunk_size.")
        if not 0 <= self.min_chunk_size <= self.max_chunk_size:
            raise ValueError(
                "`min_chunk_size` must satisfy 0 <= min_chunk_size <= max_chunk_size."
            )
        if self.split_search_window < 0:
            raise ValueError("`split_search_window` must be non-negative.")


@dataclass(frozen=True, slots=True)
class Chunk:
    """A bounded, ordered slice of normalized source text.

    Attributes:
        index: 0-based chunk index in document order.
        text: Trimmed chunk text.
        char_start: Inclusive offset of `text` in the normalized source.
        char_end: Exclusive offset of `text` in the normalized source.
        boundary_strategy: Boundary classification (`single_chunk`, `document_end`,
            `paragraph`, `sentence`, `word`, or `hard_cut`).
    """

    index: int
    text: str
    char_start: int
    char_end: int
    boundary_strategy: str = "paragraph"


@dataclass(frozen=True, slots=True)
class SegmentationResult:
    """Ordered chunks plus size metadata of the normalized source."""

    chunks: tuple[Chunk, ...]
    total_characters: int
    normalized_text: str = ""

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


@dataclass(frozen=True, slots=True)
class GenerationUnit:
    """One chunk paired with its share of the generation budget."""

    chunk: Chunk
    budget: int


@dataclass(frozen=True, slots=True)
class GenerationOutcome:
    """Merged, deduplicated, and trimmed result of one orchestrated run.

    Attributes:
        items: Final ordered items, never more than `requested_total`.
        requested_total: Item count originally requested.
        failed_unit_indices: Indices of units whose collaborator call failed.
        duplicates_removed: Items dropped by the similarity deduplicator.
    """

    items: tuple[GeneratedItem, ...]
    requested_total: int
    failed_unit_indices: tuple[int, ...] = field(default_factory=tuple)
    duplicates_removed: int = 0

    @property
    def shortfall(self) -> int:
        return max(0, self.requested_total - len(self.items))


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Previously produced content for one user/source/kind/parameter set."""

    user_id: str
    source_id: str
    kind: ContentKind
    params: Mapping[str, str]
    content: GeneratedContent
    created_at: datetime


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Result of one per-user quota check."""

    allowed: bool
    remaining: int
    reset_at: datetime
    error: str | None = None


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Request for an item-set content kind (quiz, flashcards, slides).

    Attributes:
        user_id: Requesting user identity.
        source_id: Source identity, typically the uploaded filename.
        kind: Requested content kind.
        text: Extracted plain text of the source document.
        total: Number of items requested.
        difficulty: Difficulty level label.
        skip_cache: Bypass the cache lookup when true.
    """

    user_id: str
    source_id: str
    kind: ContentKind
    text: str
    total: int
    difficulty: str = "intermediate"
    skip_cache: bool = False

    def cache_params(self) -> dict[str, str]:
        return {"difficulty": self.difficulty, "count": str(self.total)}


@dataclass(frozen=True, slots=True)
class NarrationRequest:
    """Request for a narrated audio summary."""

    user_id: str
    source_id: str
    text: str
    difficulty: str = "intermediate"
    skip_cache: bool = False

    def cache_params(self) -> dict[str, str]:
        return {"difficulty": self.difficulty}


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Content returned to the caller with run metadata."""

    content: GeneratedContent
    cached: bool = False
    generated_at: datetime | None = None
    metadata: Mapping[str, str] = field(default_factory=dict)
