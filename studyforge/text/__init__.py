"""Text preprocessing and segmentation components.

This package provides deterministic cleanup, normalization, chunking,
chunk selection, budget distribution, and similarity deduplication used
around the generative collaborator.
"""

from .budget import build_generation_units, distribute_budget
from .chunk_selection import select_representative_chunks
from .chunking import Segmenter
from .cleaners import (
    CollapseBlankLines,
    CollapseWhitespace,
    FixHyphenation,
    NormalizeLineEndings,
    RemovePageFurniture,
    RemovePageNumbers,
    TextCleaner,
)
from .normalizer import TextNormalizer
from .similarity import SimilarityDeduplicator, jaccard_similarity

__all__ = [
    "TextCleaner",
    "TextNormalizer",
    "Segmenter",
    "NormalizeLineEndings",
    "RemovePageFurniture",
    "RemovePageNumbers",
    "FixHyphenation",
    "CollapseWhitespace",
    "CollapseBlankLines",
    "select_representative_chunks",
    "distribute_budget",
    "build_generation_units",
    "SimilarityDeduplicator",
    "jaccard_similarity",
]
