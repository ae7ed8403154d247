"""Studyforge pipeline package.

This package contains the orchestration facade, concurrent generation and
speech fan-out, and stage telemetry helpers.
"""

from .generation import GenerationOrchestrator
from .orchestrator import StudyPipeline
from .speech import synthesize_pieces

__all__ = ["GenerationOrchestrator", "StudyPipeline", "synthesize_pieces"]
