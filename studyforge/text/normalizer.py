"""Text normalization stage.

Responsibilities:
- Strip PDF extraction artifacts before segmentation.
- Keep normalization deterministic; empty input yields empty output.
"""

from __future__ import annotations

from .cleaners import TextCleaner


class TextNormalizer:
    """Normalize raw extracted text into the canonical segmentation input."""

    def __init__(self, cleaner: TextCleaner | None = None) -> None:
        self.cleaner = cleaner or TextCleaner()

    def normalize(self, text: str) -> str:
        """Normalize text for downstream deterministic processing."""

        if not text:
            return ""
        return self.cleaner.clean(text).strip()


def truncate_text(text: str, max_chars: int = 10000) -> str:
    """Return at most `max_chars` leading characters of `text`."""

    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def estimate_word_count(text: str) -> int:
    """Return the number of whitespace-separated words in `text`."""

    return len(text.split())


def estimate_audio_duration(word_count: int, words_per_minute: int = 150) -> int:
    """Return estimated spoken duration in whole seconds."""

    return round(word_count / words_per_minute * 60)
