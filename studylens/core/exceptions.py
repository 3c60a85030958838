"""
StudyLens — Error Taxonomy
===========================
Every failure carries a human-readable ``message`` that is safe to show to the
user. ``detail`` holds optional diagnostic text (never credentials).

All document errors subclass ``ValueError`` so callers that only know about
ValueError keep working.
"""

from typing import Optional


class DocumentProcessingError(ValueError):
    """Base class for intake and analysis failures."""

    status_code: int = 400

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(DocumentProcessingError):
    """Bad file size, type or name."""


class FileTooLargeError(ValidationError):
    status_code = 413


class EmptyContentError(DocumentProcessingError):
    """The file decoded to blank text."""

    status_code = 422


class ExtractionError(DocumentProcessingError):
    """The file bytes could not be decoded or parsed."""

    status_code = 422


class AnalysisError(DocumentProcessingError):
    """The model call failed, came back empty, or returned an unusable reply."""

    status_code = 502


class QuizStateError(ValueError):
    """A quiz transition was requested from a state that does not allow it."""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.detail = None
