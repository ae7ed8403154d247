"""Unit tests for CLI rendering helpers and structured run logging."""

from __future__ import annotations

import io
import json
from datetime import datetime, timezone

import pytest
import typer

from studyforge.cli_rendering import (
    echo_run_summary,
    echo_segmentation,
    exit_with_command_error,
    render_result_json,
)
from studyforge.errors import PipelineStageError
from studyforge.models.content import Narration, Question, QuestionSet
from studyforge.models.datatypes import Chunk, PipelineResult, SegmentationResult
from studyforge.telemetry.logger import RunLogger, format_event, log_event


def _quiz_result(cached: bool = False) -> PipelineResult:
    return PipelineResult(
        content=QuestionSet(
            questions=(
                Question(
                    question="What is 2 + 2?",
                    options=("3", "4", "5", "6"),
                    correct_answer=1,
                    difficulty="basic",
                ),
            ),
            difficulty="basic",
        ),
        cached=cached,
        generated_at=datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc),
        metadata={"unit_count": "1", "chunk_count": "1"},
    )


def test_exit_with_command_error_prints_stage_and_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Stage errors should print the stage, detail, and hint before exiting with 1."""

    error = PipelineStageError(stage="generate", detail="Provider down.", hint="Retry later.")

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("generate", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "generate failed at stage `generate`: Provider down." in captured.err
    assert "Hint: Retry later." in captured.err


def test_exit_with_command_error_handles_unexpected_exceptions(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Non-stage errors should still produce a concise one-line diagnostic."""

    with pytest.raises(typer.Exit):
        exit_with_command_error("chunks", RuntimeError("unexpected"))

    assert "chunks failed: unexpected" in capsys.readouterr().err


def test_echo_segmentation_prints_one_row_per_chunk(
    capsys: pytest.CaptureFixture[str],
) -> None:
    result = SegmentationResult(
        chunks=(
            Chunk(index=0, text="a" * 10, char_start=0, char_end=10, boundary_strategy="word"),
            Chunk(
                index=1,
                text="b" * 5,
                char_start=8,
                char_end=13,
                boundary_strategy="document_end",
            ),
        ),
        total_characters=13,
    )

    echo_segmentation(result)

    assert capsys.readouterr().out.splitlines() == [
        "Total characters: 13",
        "Chunks: 2",
        "0. chars=10 span=0-10 boundary=word",
        "1. chars=5 span=8-13 boundary=document_end",
    ]


def test_render_result_json_includes_cache_flag_and_timestamp() -> None:
    """Rendered JSON should carry the content payload plus cache metadata."""

    payload = json.loads(render_result_json(_quiz_result(cached=True)))

    assert payload["cached"] is True
    assert payload["generatedAt"] == "2026-01-05T12:00:00+00:00"
    assert payload["count"] == 1
    assert payload["questions"][0]["correctAnswer"] == 1


def test_echo_run_summary_prints_narration_details_and_sorted_metadata(
    capsys: pytest.CaptureFixture[str],
) -> None:
    result = PipelineResult(
        content=Narration(
            script="Script.",
            audio_reference="",
            duration_seconds=42,
            voice="onyx",
            difficulty="basic",
        ),
        metadata={"word_count": "105", "audio_bytes": "2048"},
    )

    echo_run_summary(result)

    assert capsys.readouterr().out.splitlines() == [
        "Cached: no",
        "Audio: (not stored)",
        "Duration (s): 42",
        "Voice: onyx",
        "audio_bytes: 2048",
        "word_count: 105",
    ]


def test_format_event_sanitizes_and_sorts_context() -> None:
    """Context values should be sorted by key and made shell-safe."""

    line = format_event("INFO", "generate", "unit_failed", unit=2, error_type="Bad Error!")

    assert line == (
        "[phase] level=INFO stage=generate event=unit_failed error_type=Bad_Error_ unit=2"
    )
    assert format_event("INFO", "cache", "hit", source="") == (
        "[phase] level=INFO stage=cache event=hit source=none"
    )


def test_run_logger_writes_phase_lines_to_sink() -> None:
    """Run loggers should route stage and library events to the configured sink."""

    sink = io.StringIO()
    run_logger = RunLogger(sink=sink, level="INFO")

    run_logger.log_stage_start("segment")
    run_logger.log_stage_failure("generate", "CollaboratorError")
    log_event("DEBUG", "retry", "backoff", attempt="1/3")

    assert sink.getvalue().splitlines() == [
        "[phase] level=INFO stage=segment event=start",
        "[phase] level=ERROR stage=generate event=failure error_type=CollaboratorError",
    ]
