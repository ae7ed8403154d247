"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level runtime logs through `loguru`.
- Share one line format between the pipeline facade and library components.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def format_event(level: str, stage: str, event: str, **context: object) -> str:
    """Return one structured runtime log line."""

    return f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"


def log_event(level: str, stage: str, event: str, **context: object) -> None:
    """Emit one structured runtime log line at the given loguru level."""

    logger.log(level, format_event(level, stage, event, **context))


class RunLogger:
    """Emit deterministic phase logs for CLI-observable pipeline activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stderr
        logger.remove()
        logger.add(self._sink, format="{message}", level=level, colorize=False)

    def log_stage_start(self, stage: str) -> None:
        """Emit a stage-start runtime event."""

        log_event("INFO", stage, "start")

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete runtime event."""

        log_event("INFO", stage, "complete", **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        log_event("ERROR", stage, "failure", error_type=error_type)
