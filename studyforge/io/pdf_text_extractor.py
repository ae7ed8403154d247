"""Document text extraction.

Responsibilities:
- Define the minimal interface for extracting plain text from source documents.
- Extract text from PDF bytes with `pypdf`, page by page.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Protocol

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..errors import CollaboratorError, EmptyDocumentError, ErrorKind


class TextExtractor(Protocol):
    """Extract plain text from raw document bytes."""

    def extract(self, data: bytes) -> str:
        """Return extracted text or raise `EmptyDocumentError`."""


class PypdfTextExtractor:
    """Extractor for text-based PDFs using `pypdf`."""

    def extract(self, data: bytes) -> str:
        """Extract all text from PDF bytes."""

        text = "\n".join(self.extract_pages(data)).strip()
        if not text:
            raise EmptyDocumentError(
                "No extractable text found in PDF. Only text-based PDFs are supported."
            )
        return text

    def extract_pages(self, data: bytes) -> list[str]:
        """Extract text per page from PDF bytes."""

        if not data:
            raise EmptyDocumentError("PDF input is empty.")
        try:
            reader = PdfReader(BytesIO(data))
            pages: list[str] = []
            for page in reader.pages:
                extracted_text = page.extract_text()
                pages.append((extracted_text or "").replace("\f", "\n").strip())
        except PdfReadError as exc:
            raise CollaboratorError(
                f"Could not parse PDF: {exc}",
                kind=ErrorKind.INPUT_INVALID,
            ) from exc
        return pages


class PlainTextExtractor:
    """Extractor for UTF-8 plain-text sources."""

    def extract(self, data: bytes) -> str:
        text = data.decode("utf-8", errors="replace").strip()
        if not text:
            raise EmptyDocumentError()
        return text


def extractor_for_path(path: Path) -> TextExtractor:
    """Return the extractor matching a source file suffix."""

    if path.suffix.lower() == ".pdf":
        return PypdfTextExtractor()
    return PlainTextExtractor()
