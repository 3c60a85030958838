"""
StudyLens — Response Envelopes
===============================
Every response from this API is wrapped in AnalysisResponse / QuizStateResponse
on success, or ErrorResponse on failure.
"""

from typing import Optional

from pydantic import BaseModel, Field

from studylens.schemas.analysis import DocumentAnalysis


# ── Processing Metadata ─────────────────────────────────────────────────────

class ProcessingMeta(BaseModel):
    """Metadata about the processing run."""
    processing_time: str = Field(..., description="e.g. '12.4s'")
    file_name: str
    characters: int = Field(..., description="Characters of extracted text")
    truncated: bool = Field(..., description="Only the leading part was sent to the model")
    warning: Optional[str] = None


# ── Unified Response ─────────────────────────────────────────────────────────

class AnalysisViews(BaseModel):
    """Static tabs, rendered once per analysis."""
    summary: dict
    questions: dict
    overview: dict


class ResponseData(BaseModel):
    analysis: DocumentAnalysis
    views: AnalysisViews


class AnalysisResponse(BaseModel):
    """Standard success envelope for /api/v1/analyze."""
    status: str = "success"
    meta: ProcessingMeta
    data: ResponseData


class ErrorResponse(BaseModel):
    """Standard error envelope."""
    status: str = "error"
    message: str
    detail: Optional[str] = None
