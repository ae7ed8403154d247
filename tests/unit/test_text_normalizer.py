"""Unit tests for PDF-artifact cleanup and text normalization helpers."""

from __future__ import annotations

from studyforge.text.cleaners import (
    CollapseBlankLines,
    FixHyphenation,
    RemovePageFurniture,
    TextCleaner,
)
from studyforge.text.normalizer import (
    TextNormalizer,
    estimate_audio_duration,
    estimate_word_count,
    truncate_text,
)


def test_normalizer_converts_line_endings_and_strips_edges() -> None:
    """CRLF and bare CR should become LF and outer whitespace should be removed."""

    normalized = TextNormalizer().normalize("  Line one\r\nLine two\rLine three  \n")

    assert normalized == "Line one\nLine two\nLine three"


def test_normalizer_removes_page_markers_and_page_number_lines() -> None:
    """Page furniture and number-only lines should not survive normalization."""

    raw = "Intro text Page 3 of 10 more text\n12\nNext paragraph"

    normalized = TextNormalizer().normalize(raw)

    assert "Page" not in normalized
    assert "12" not in normalized
    assert normalized == "Intro text more text\n\nNext paragraph"


def test_normalizer_repairs_hyphenation_and_collapses_whitespace() -> None:
    """Line-break hyphenation should be joined and runs of spaces collapsed."""

    raw = "An exam-\nple of\t\tspaced    words\n\n\n\n   indented line"

    normalized = TextNormalizer().normalize(raw)

    assert normalized == "An example of spaced words\n\nindented line"


def test_normalizer_is_idempotent_and_empty_safe() -> None:
    """Normalizing twice should equal normalizing once; blank input should stay empty."""

    normalizer = TextNormalizer()
    raw = "Heading\r\n\r\n\r\nBody   text with Page 2 marker.\n7\nEnd-\ning."

    once = normalizer.normalize(raw)

    assert normalizer.normalize(once) == once
    assert normalizer.normalize("") == ""
    assert normalizer.normalize(" \n\t \r\n ") == ""


def test_individual_cleaner_rules_are_composable() -> None:
    """Custom rule sequences should apply only the configured transformations."""

    cleaner = TextCleaner(rules=[FixHyphenation(), CollapseBlankLines()])

    assert cleaner.clean("co-\noperate\n\n\n\nnext") == "cooperate\n\nnext"
    assert RemovePageFurniture().apply("page 4 content") == " content"


def test_truncate_and_duration_helpers() -> None:
    """Truncation should cap leading characters and duration should use 150 wpm."""

    assert truncate_text("abcdef", 4) == "abcd"
    assert truncate_text("abc", 10) == "abc"
    assert estimate_word_count("one two\nthree   four") == 4
    assert estimate_audio_duration(150) == 60
    assert estimate_audio_duration(1000) == 400
    assert estimate_audio_duration(0) == 0
