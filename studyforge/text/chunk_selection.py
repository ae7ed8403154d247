"""Representative chunk selection helpers.

Responsibilities:
- Bound the number of chunks sent to the generative collaborator.
- Keep beginning, middle, and end coverage of the source document.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

ChunkT = TypeVar("ChunkT")


def select_representative_chunks(chunks: Sequence[ChunkT], max_chunks: int) -> list[ChunkT]:
    """Select at most `max_chunks` chunks spread across the document.

    The first chunk is always kept, and the last chunk is kept whenever
    `max_chunks > 1`. Remaining slots are filled from interior chunks at an
    even stride, in document order.

    Raises:
        ValueError: If `max_chunks` is smaller than one.
    """

    if max_chunks < 1:
        raise ValueError("`max_chunks` must be at least 1.")
    if len(chunks) <= max_chunks:
        return list(chunks)

    selected: list[ChunkT] = [chunks[0]]
    if max_chunks == 1:
        return selected

    interior = chunks[1:-1]
    remaining_slots = max_chunks - 2
    if remaining_slots > 0 and interior:
        step = len(interior) // (remaining_slots + 1)
        for slot in range(remaining_slots):
            selected.append(interior[min((slot + 1) * step, len(interior) - 1)])

    selected.append(chunks[-1])
    return selected
