"""Top-level package for Studyforge.

This package turns text-based documents into study material: quiz questions,
flashcards, slide decks, and narrated audio summaries. The main orchestration
entry point is `StudyPipeline`.
"""

from .pipeline import StudyPipeline

__all__ = ["StudyPipeline", "__version__"]

__version__ = "0.1.0"
