"""Command-line interface for Studyforge.

Responsibilities:
- Expose user-facing commands for segmentation, generation, and narration.
- Convert CLI arguments into `StudyforgeConfig` and pipeline requests.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_run_summary,
    echo_segmentation,
    exit_with_command_error,
    render_result_json,
)
from .config import ConfigLoader, StudyforgeConfig
from .errors import CollaboratorError, PipelineStageError
from .io.pdf_text_extractor import extractor_for_path
from .models.content import ContentKind
from .models.datatypes import GenerationRequest, NarrationRequest
from .pipeline import StudyPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="studyforge",
    no_args_is_help=True,
    help="Studyforge CLI.",
)


class StageProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}",
            err=True,
        )


def _load_config(config_path: Path | None) -> StudyforgeConfig:
    """Load YAML defaults when requested, apply environment overrides, and map failures."""

    try:
        base = ConfigLoader.from_yaml(config_path) if config_path is not None else None
        return ConfigLoader.from_env(base=base)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Fix config file values or STUDYFORGE_* variables and rerun.",
        ) from exc


def _read_source(input_path: Path) -> str:
    """Extract text from a PDF or plain-text source file."""

    try:
        data = input_path.read_bytes()
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="extract",
            detail=f"Input file not found: `{input_path}`.",
            hint="Pass an existing PDF or text file path.",
        ) from exc
    try:
        return extractor_for_path(input_path).extract(data)
    except CollaboratorError as exc:
        raise PipelineStageError(
            stage="extract",
            detail=str(exc),
            hint="Only text-based PDFs and UTF-8 text files are supported.",
        ) from exc


def _build_pipeline(config: StudyforgeConfig, command_name: str) -> StudyPipeline:
    progress = StageProgressIndicator(command_name=command_name)
    return StudyPipeline(
        config,
        run_logger=RunLogger(level=config.log_level),
        stage_progress_callback=progress.on_stage_start,
    )


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
DifficultyOption = Annotated[
    str,
    typer.Option(
        "--difficulty",
        help="Difficulty level: `basic`, `intermediate`, or `advanced`.",
    ),
]
UserOption = Annotated[
    str,
    typer.Option("--user", help="User identity for rate limiting and caching."),
]
SkipCacheOption = Annotated[
    bool,
    typer.Option("--skip-cache", help="Ignore cached content and generate fresh output."),
]


@app.command("chunks")
def chunks_command(
    input_path: Annotated[Path, typer.Argument(help="Path to source PDF or text file.")],
    config_file: ConfigOption = None,
) -> None:
    """Print how a document is normalized and segmented."""

    try:
        config = _load_config(config_file)
        text = _read_source(input_path)
        result = StudyPipeline(config).segment(text)
    except Exception as exc:
        exit_with_command_error("chunks", exc)

    echo_segmentation(result)


@app.command("generate")
def generate_command(
    input_path: Annotated[Path, typer.Argument(help="Path to source PDF or text file.")],
    kind: Annotated[
        str,
        typer.Option("--kind", help="Content kind: `quiz`, `flashcards`, or `slides`."),
    ] = "quiz",
    count: Annotated[
        int, typer.Option("--count", min=1, help="Number of items to generate.")
    ] = 10,
    difficulty: DifficultyOption = "intermediate",
    user: UserOption = "local",
    config_file: ConfigOption = None,
    skip_cache: SkipCacheOption = False,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Write the JSON result to this file instead of stdout."),
    ] = None,
) -> None:
    """Generate quiz questions, flashcards, or slides from a document."""

    try:
        try:
            content_kind = ContentKind.parse(kind)
        except ValueError as exc:
            raise PipelineStageError(stage="request", detail=str(exc)) from exc
        if content_kind is ContentKind.NARRATION:
            raise PipelineStageError(
                stage="request",
                detail="Narration is produced by the `narrate` command.",
                hint="Run `studyforge narrate <input>`.",
            )
        config = _load_config(config_file)
        text = _read_source(input_path)
        pipeline = _build_pipeline(config, "generate")
        result = pipeline.generate(
            GenerationRequest(
                user_id=user,
                source_id=input_path.name,
                kind=content_kind,
                text=text,
                total=count,
                difficulty=difficulty.strip().lower(),
                skip_cache=skip_cache,
            )
        )
    except Exception as exc:
        exit_with_command_error("generate", exc)

    rendered = render_result_json(result)
    if out is None:
        typer.echo(rendered)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(rendered + "\n", encoding="utf-8")
        typer.echo(f"Result: {out}")
    echo_run_summary(result)


@app.command("narrate")
def narrate_command(
    input_path: Annotated[Path, typer.Argument(help="Path to source PDF or text file.")],
    difficulty: DifficultyOption = "intermediate",
    user: UserOption = "local",
    config_file: ConfigOption = None,
    skip_cache: SkipCacheOption = False,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output directory for audio (overrides config value)."),
    ] = None,
) -> None:
    """Write and synthesize a narrated audio summary of a document."""

    try:
        config = _load_config(config_file)
        if out is not None:
            config = replace(config, output_dir=out)
        text = _read_source(input_path)
        pipeline = _build_pipeline(config, "narrate")
        result = pipeline.narrate(
            NarrationRequest(
                user_id=user,
                source_id=input_path.name,
                text=text,
                difficulty=difficulty.strip().lower(),
                skip_cache=skip_cache,
            )
        )
    except Exception as exc:
        exit_with_command_error("narrate", exc)

    echo_run_summary(result)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
