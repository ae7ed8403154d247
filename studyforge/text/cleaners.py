"""Deterministic text cleaning rules.

Responsibilities:
- Provide composable cleanup rules for PDF-derived text artifacts.
- Keep preprocessing predictable for reproducibility.
"""

from __future__ import annotations

import re
from typing import Protocol


class CleanerRule(Protocol):
    """Protocol for text cleaning rules."""

    def apply(self, text: str) -> str:
        """Apply a single cleaning transformation."""


class NormalizeLineEndings:
    """Convert carriage returns and form feeds to plain newlines."""

    def apply(self, text: str) -> str:
        return text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")


class RemovePageFurniture:
    """Remove `Page N` and `Page N of M` markers left by PDF extraction."""

    _PAGE_MARKER_RE = re.compile(r"\bpage\s*\d+(?:\s*of\s*\d+)?\b", re.IGNORECASE)

    def apply(self, text: str) -> str:
        return self._PAGE_MARKER_RE.sub("", text)


class RemovePageNumbers:
    """Remove isolated numeric page markers from text."""

    def apply(self, text: str) -> str:
        """Apply page-number cleanup rule."""

        return re.sub(r"(?m)^[ \t]*\d+[ \t]*$", "", text)


class FixHyphenation:
    """Repair line-break hyphenation artifacts."""

    def apply(self, text: str) -> str:
        """Join words split with hyphen + newline."""

        return re.sub(r"(\w)-\n(\w)", r"\1\2", text)


class CollapseWhitespace:
    """Normalize repeated whitespace to single spaces while keeping line breaks."""

    def apply(self, text: str) -> str:
        """Collapse consecutive spaces and strip line heads and tails."""

        text = re.sub(r"[^\S\n]+", " ", text)
        text = re.sub(r" +\n", "\n", text)
        return re.sub(r"\n +", "\n", text)


class CollapseBlankLines:
    """Reduce runs of three or more newlines to one paragraph break."""

    def apply(self, text: str) -> str:
        return re.sub(r"\n{3,}", "\n\n", text)


class TextCleaner:
    """Apply a sequence of deterministic cleaner rules."""

    def __init__(self, rules: list[CleanerRule] | None = None) -> None:
        """Initialize with custom rules or default rule sequence."""

        self.rules = rules or [
            NormalizeLineEndings(),
            RemovePageFurniture(),
            RemovePageNumbers(),
            FixHyphenation(),
            CollapseWhitespace(),
            CollapseBlankLines(),
        ]

    def clean(self, text: str) -> str:
        """Apply all configured rules in order."""

        current = text
        for rule in self.rules:
            current = rule.apply(current)
        return current
