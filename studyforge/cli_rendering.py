"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
segmentation rows, and generated-content payloads.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer

from .errors import PipelineStageError
from .models.content import Narration, content_to_payload
from .models.datatypes import PipelineResult, SegmentationResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_segmentation(result: SegmentationResult) -> None:
    """Print segmentation totals and one row per chunk."""

    typer.echo(f"Total characters: {result.total_characters}")
    typer.echo(f"Chunks: {result.chunk_count}")
    for chunk in result.chunks:
        typer.echo(
            f"{chunk.index}. chars={len(chunk.text)} "
            f"span={chunk.char_start}-{chunk.char_end} boundary={chunk.boundary_strategy}"
        )


def result_payload(result: PipelineResult) -> dict[str, Any]:
    """Return the JSON payload printed or written for a pipeline result."""

    payload = content_to_payload(result.content)
    payload["cached"] = result.cached
    if result.generated_at is not None:
        payload["generatedAt"] = result.generated_at.isoformat()
    return payload


def render_result_json(result: PipelineResult) -> str:
    """Serialize a pipeline result into stable, human-readable JSON."""

    return json.dumps(result_payload(result), ensure_ascii=False, indent=2, sort_keys=True)


def echo_run_summary(result: PipelineResult) -> None:
    """Print cache status and run metadata rows."""

    typer.echo(f"Cached: {'yes' if result.cached else 'no'}")
    if isinstance(result.content, Narration):
        typer.echo(f"Audio: {result.content.audio_reference or '(not stored)'}")
        typer.echo(f"Duration (s): {result.content.duration_seconds}")
        typer.echo(f"Voice: {result.content.voice}")
    for key in sorted(result.metadata):
        if key == "cached":
            continue
        typer.echo(f"{key}: {result.metadata[key]}")
