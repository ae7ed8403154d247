"""Input/output adapters for documents, artifacts, and generated content."""

from .pdf_text_extractor import (
    PlainTextExtractor,
    PypdfTextExtractor,
    TextExtractor,
    extractor_for_path,
)
from .storage import ArtifactStore, ContentStore, InMemoryContentStore, JsonFileContentStore

__all__ = [
    "ArtifactStore",
    "ContentStore",
    "InMemoryContentStore",
    "JsonFileContentStore",
    "PlainTextExtractor",
    "PypdfTextExtractor",
    "TextExtractor",
    "extractor_for_path",
]
