"""Concurrent speech synthesis of narration script pieces.

Responsibilities:
- Synthesize every script piece concurrently under the retry policy.
- Return audio segments in script order regardless of completion order.
- Fail the whole narration when any piece fails; audio cannot have gaps.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

from ..llm.retry import RetryPolicy
from ..telemetry.logger import log_event
from ..tts.synthesizer import SpeechSynthesizer


@dataclass(frozen=True, slots=True)
class _PieceResult:
    index: int
    audio: bytes = b""
    error: Exception | None = None


async def synthesize_pieces(
    pieces: Sequence[str],
    synthesizer: SpeechSynthesizer,
    retry_policy: RetryPolicy,
) -> list[bytes]:
    """Return one audio segment per piece, ordered like `pieces`.

    Raises:
        Exception: The error of the first failed piece in script order, after
            all pieces have finished.
    """

    async def run_piece(index: int, piece: str) -> _PieceResult:
        try:
            audio = await asyncio.to_thread(
                retry_policy.call,
                lambda: synthesizer.synthesize(piece),
                operation="tts",
            )
        except Exception as exc:
            log_event(
                "ERROR",
                "tts",
                "piece_failed",
                piece=index,
                error_type=type(exc).__name__,
            )
            return _PieceResult(index=index, error=exc)
        return _PieceResult(index=index, audio=audio)

    async with asyncio.TaskGroup() as group:
        tasks = [
            group.create_task(run_piece(index, piece)) for index, piece in enumerate(pieces)
        ]

    results = sorted((task.result() for task in tasks), key=lambda item: item.index)
    for result in results:
        if result.error is not None:
            raise result.error
    return [result.audio for result in results]
