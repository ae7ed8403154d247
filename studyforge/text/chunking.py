"""Document-to-chunk segmentation logic.

Responsibilities:
- Split normalized document text into bounded, overlapping chunks.
- Prefer paragraph, then sentence, then word boundaries near each cut.
- Preserve offset metadata so chunk coverage of the source can be audited.
"""

from __future__ import annotations

from ..models.datatypes import Chunk, SegmentationOptions, SegmentationResult
from .normalizer import TextNormalizer


class Segmenter:
    """Create boundary-aware chunks from normalized text with deterministic fallback."""

    _PARAGRAPH_BREAK = "\n\n"
    _SENTENCE_BREAKS = (". ", "? ", "! ", ".\n", "?\n", "!\n")

    def __init__(self, normalizer: TextNormalizer | None = None) -> None:
        self.normalizer = normalizer or TextNormalizer()

    def segment(
        self,
        text: str,
        options: SegmentationOptions | None = None,
    ) -> SegmentationResult:
        """Normalize and split text into chunk records.

        Args:
            text: Raw extracted document text.
            options: Chunk size, overlap, minimum size, and boundary search window.

        Returns:
            Segmentation result with chunks indexed `0..n-1` in document order.
        """

        options = options or SegmentationOptions()
        normalized = self.normalizer.normalize(text)
        total = len(normalized)
        if not normalized:
            return SegmentationResult(chunks=(), total_characters=0, normalized_text="")

        if total <= options.max_chunk_size:
            chunk = Chunk(
                index=0,
                text=normalized,
                char_start=0,
                char_end=total,
                boundary_strategy="single_chunk",
            )
            return SegmentationResult(
                chunks=(chunk,),
                total_characters=total,
                normalized_text=normalized,
            )

        chunks: list[Chunk] = []
        position = 0
        while position < total:
            candidate_end = position + options.max_chunk_size
            if candidate_end >= total:
                tail = self._make_chunk(
                    normalized, len(chunks), position, total, "document_end"
                )
                if tail is not None:
                    chunks.append(tail)
                break

            split_point, boundary_strategy = self._find_split_point(
                normalized,
                position=position,
                candidate_end=candidate_end,
                search_window=options.split_search_window,
            )
            chunk = self._make_chunk(
                normalized, len(chunks), position, split_point, boundary_strategy
            )
            if chunk is not None and len(chunk.text) >= options.min_chunk_size:
                chunks.append(chunk)

            position = max(position + 1, split_point - options.overlap_size)

        return SegmentationResult(
            chunks=tuple(chunks),
            total_characters=total,
            normalized_text=normalized,
        )

    def _find_split_point(
        self,
        text: str,
        *,
        position: int,
        candidate_end: int,
        search_window: int,
    ) -> tuple[int, str]:
        """Return the best split index at or before `candidate_end` and its strategy."""

        search_start = max(position + 1, candidate_end - search_window)
        search_area = text[search_start:candidate_end]

        paragraph_index = search_area.rfind(self._PARAGRAPH_BREAK)
        if paragraph_index != -1:
            return search_start + paragraph_index + len(self._PARAGRAPH_BREAK), "paragraph"

        for pattern in self._SENTENCE_BREAKS:
            sentence_index = search_area.rfind(pattern)
            if sentence_index != -1:
                return search_start + sentence_index + len(pattern), "sentence"

        word_index = search_area.rfind(" ")
        if word_index != -1:
            return search_start + word_index + 1, "word"

        return candidate_end, "hard_cut"

    def _make_chunk(
        self,
        text: str,
        index: int,
        start: int,
        end: int,
        boundary_strategy: str,
    ) -> Chunk | None:
        """Trim `text[start:end]` and record offsets of the trimmed slice."""

        raw = text[start:end]
        trimmed = raw.strip()
        if not trimmed:
            return None
        char_start = start + (len(raw) - len(raw.lstrip()))
        return Chunk(
            index=index,
            text=trimmed,
            char_start=char_start,
            char_end=char_start + len(trimmed),
            boundary_strategy=boundary_strategy,
        )
