"""Shared typed data models for Studyforge.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .content import (
    ContentKind,
    Flashcard,
    FlashcardSet,
    GeneratedContent,
    Narration,
    Question,
    QuestionSet,
    Slide,
    SlideDeck,
)
from .datatypes import (
    CacheEntry,
    Chunk,
    GenerationOutcome,
    GenerationRequest,
    GenerationUnit,
    NarrationRequest,
    PipelineResult,
    RateLimitDecision,
    SegmentationOptions,
    SegmentationResult,
)

__all__ = [
    "CacheEntry",
    "Chunk",
    "ContentKind",
    "Flashcard",
    "FlashcardSet",
    "GeneratedContent",
    "GenerationOutcome",
    "GenerationRequest",
    "GenerationUnit",
    "Narration",
    "NarrationRequest",
    "PipelineResult",
    "Question",
    "QuestionSet",
    "RateLimitDecision",
    "SegmentationOptions",
    "SegmentationResult",
    "Slide",
    "SlideDeck",
]
