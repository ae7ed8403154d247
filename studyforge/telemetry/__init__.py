"""Telemetry and observability helpers.

This package emits deterministic run events for auditing pipeline behavior.
"""

from .logger import RunLogger, log_event

__all__ = ["RunLogger", "log_event"]
