"""Narration script splitting for per-call speech synthesis limits.

Responsibilities:
- Split long scripts into pieces no longer than the speech engine ceiling.
- Prefer sentence ends, then spaces, then a hard cut.
"""

from __future__ import annotations

_SENTENCE_TERMINATORS = ".!?"


def _last_sentence_end(window: str, lowest_index: int) -> int:
    """Return the index just after the last sentence terminator, or -1."""

    for index in range(len(window) - 1, max(lowest_index, 0) - 1, -1):
        if window[index] not in _SENTENCE_TERMINATORS:
            continue
        if index == len(window) - 1 or window[index + 1].isspace():
            return index + 1
    return -1


def split_for_synthesis(
    script: str,
    max_chars: int = 4000,
    sentence_window: int = 500,
) -> list[str]:
    """Split `script` into ordered, trimmed, non-empty pieces of at most `max_chars`.

    A sentence end inside the trailing `sentence_window` characters of the
    limit is used when it lies beyond half of `max_chars`. Otherwise the last
    space within the limit is used under the same condition, and a hard cut at
    `max_chars` is the last resort.
    """

    if max_chars <= 0:
        raise ValueError("`max_chars` must be a positive integer.")

    pieces: list[str] = []
    remaining = script.strip()
    half = max_chars / 2
    while remaining:
        if len(remaining) <= max_chars:
            pieces.append(remaining)
            break

        split_index = max_chars
        sentence_end = _last_sentence_end(remaining[:max_chars], max_chars - sentence_window)
        if sentence_end > half:
            split_index = sentence_end
        else:
            last_space = remaining.rfind(" ", 0, max_chars + 1)
            if last_space > half:
                split_index = last_space

        piece = remaining[:split_index].strip()
        if piece:
            pieces.append(piece)
        remaining = remaining[split_index:].strip()
    return pieces
