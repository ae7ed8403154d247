"""Domain exceptions and error classification for pipeline and CLI diagnostics.

Responsibilities:
- Classify collaborator failures into a closed set of error kinds.
- Carry stage-scoped, user-facing failure details up to the CLI.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum


class ErrorKind(str, Enum):
    """Structured failure classes used for retry and propagation decisions."""

    TRANSIENT = "transient"
    INPUT_INVALID = "input_invalid"
    QUOTA_EXCEEDED = "quota_exceeded"
    CONTRACT_VIOLATION = "contract_violation"


class CollaboratorError(RuntimeError):
    """Raised by an external collaborator boundary with a structured error kind."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        status_code: int | None = None,
    ) -> None:
        """Initialize collaborator error metadata."""

        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        """Return whether the failure is likely to succeed on retry."""

        return self.kind is ErrorKind.TRANSIENT


class EmptyDocumentError(CollaboratorError):
    """Raised when no text is recoverable from a source document."""

    def __init__(self, message: str = "No text could be extracted from the document.") -> None:
        """Initialize an input-invalid error for empty documents."""

        super().__init__(message, kind=ErrorKind.INPUT_INVALID)


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class RateLimitExceededError(PipelineStageError):
    """Raised before any generation work when a user's quota is exhausted."""

    def __init__(self, *, detail: str, remaining: int, reset_at: datetime) -> None:
        """Initialize quota metadata so callers can inform the user precisely."""

        super().__init__(
            stage="rate-limit",
            detail=detail,
            hint=f"Quota resets at {reset_at.isoformat()}.",
        )
        self.kind = ErrorKind.QUOTA_EXCEEDED
        self.remaining = remaining
        self.reset_at = reset_at


def is_transient_error(error: BaseException) -> bool:
    """Return whether an error is classified as transient by its collaborator."""

    return isinstance(error, CollaboratorError) and error.is_transient
