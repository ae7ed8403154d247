"""Unit tests for Jaccard similarity and near-duplicate removal."""

from __future__ import annotations

import pytest

from studyforge.models.content import Flashcard, Question
from studyforge.text.similarity import SimilarityDeduplicator, jaccard_similarity


def _card(front: str) -> Flashcard:
    return Flashcard(front=front, back="answer")


def test_jaccard_similarity_uses_lowercased_token_sets() -> None:
    """Similarity should be intersection over union of case-folded tokens."""

    assert jaccard_similarity("a b c", "a b d") == pytest.approx(0.5)
    assert jaccard_similarity("The Cell Wall", "the cell wall") == 1.0
    assert jaccard_similarity("alpha alpha beta", "beta alpha") == 1.0
    assert jaccard_similarity("alpha", "omega") == 0.0


def test_jaccard_similarity_of_empty_texts() -> None:
    """Two empty texts are identical while empty versus non-empty shares nothing."""

    assert jaccard_similarity("", "   ") == 1.0
    assert jaccard_similarity("", "something") == 0.0


def test_dedupe_keeps_first_of_near_duplicates_in_order() -> None:
    """Later near-duplicates should be dropped while first occurrences keep their order."""

    items = [
        _card("What is the function of mitochondria in a cell"),
        _card("Define osmosis"),
        _card("What is the function of the mitochondria in a cell"),
        _card("Explain the Krebs cycle"),
        _card("define OSMOSIS"),
    ]

    kept = SimilarityDeduplicator(0.7).dedupe(items)

    assert [item.front for item in kept] == [
        "What is the function of mitochondria in a cell",
        "Define osmosis",
        "Explain the Krebs cycle",
    ]


def test_dedupe_drops_candidates_exactly_at_threshold() -> None:
    """A candidate whose similarity equals the threshold counts as a duplicate."""

    first = Question(
        question=" ".join(f"t{index}" for index in range(10)),
        options=("a", "b", "c", "d"),
        correct_answer=0,
    )
    second = Question(
        question=" ".join(f"t{index}" for index in range(7)),
        options=("a", "b", "c", "d"),
        correct_answer=1,
    )

    assert jaccard_similarity(first.question, second.question) == pytest.approx(0.7)
    assert SimilarityDeduplicator(0.7).dedupe([first, second]) == [first]
    assert SimilarityDeduplicator(0.8).dedupe([first, second]) == [first, second]


def test_dedupe_output_is_pairwise_distinct_and_idempotent() -> None:
    """No kept pair should reach the threshold and deduping twice changes nothing."""

    fronts = [
        "cell membrane structure",
        "cell membrane structure and function",
        "membrane structure of the cell",
        "photosynthesis light reactions",
        "light reactions of photosynthesis",
        "dark reactions",
        "",
        "  ",
    ]
    deduplicator = SimilarityDeduplicator(0.6)

    kept = deduplicator.dedupe([_card(front) for front in fronts])

    for index, item in enumerate(kept):
        for other in kept[index + 1 :]:
            assert jaccard_similarity(item.front, other.front) < 0.6
    assert deduplicator.dedupe(kept) == kept


def test_dedupe_threshold_override_and_validation() -> None:
    """Per-call thresholds should override the default; invalid defaults are rejected."""

    items = [_card("alpha beta"), _card("alpha gamma")]

    assert len(SimilarityDeduplicator(0.9).dedupe(items)) == 2
    assert len(SimilarityDeduplicator(0.9).dedupe(items, threshold=0.3)) == 1
    with pytest.raises(ValueError, match="threshold"):
        SimilarityDeduplicator(1.5)
