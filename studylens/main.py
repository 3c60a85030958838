"""
StudyLens — Document Study Assistant
=====================================
FastAPI entry point.
  • Global exception handlers — every failure returns the JSON error envelope
  • /api/v1/analyze — upload → text → summary, key points, questions, quiz
  • /api/v1/quiz/*  — stateless quiz session transitions
  • TXT/PDF/DOC/DOCX validation (MIME type or extension + size)
"""

import time
import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from studylens.api.v1.endpoints import quiz
from studylens.core.config import settings
from studylens.core.exceptions import DocumentProcessingError, QuizStateError
from studylens.schemas.api import (
    AnalysisResponse,
    AnalysisViews,
    ErrorResponse,
    ProcessingMeta,
    ResponseData,
)
from studylens.services.analysis_service import AnalysisService
from studylens.services.file_service import intake_file
from studylens.services.llm_client import build_llm_client
from studylens.views import overview_view, questions_view, summary_view

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# ── App ──────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="StudyLens — Document Study Assistant",
    description=(
        "Upload a document → receive a summary, key points, reflection "
        "questions and an interactive multiple-choice quiz."
    ),
    version=VERSION,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


# ── Exception Handlers ──────────────────────────────────────────────────────
@app.exception_handler(DocumentProcessingError)
@app.exception_handler(QuizStateError)
async def domain_exception_handler(request: Request, exc):
    """Known failures: user-facing message, session stays usable."""
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    body = ErrorResponse(status="error", message=exc.message, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all: every unhandled exception returns a clean JSON envelope."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    body = ErrorResponse(
        status="error",
        message="An internal server error occurred.",
        detail=str(exc),
    )
    return JSONResponse(status_code=500, content=body.model_dump())


# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quiz.router, prefix="/api/v1")


# ── Dependencies ─────────────────────────────────────────────────────────────
@lru_cache
def get_analyzer() -> AnalysisService:
    """One analysis service per process, built from settings on first use."""
    return AnalysisService(build_llm_client(settings), settings)


# ── Health Check ─────────────────────────────────────────────────────────────
@app.get("/", tags=["System"])
async def health_check():
    return {
        "status": "operational",
        "service": "StudyLens",
        "version": VERSION,
        "provider": settings.AI_PROVIDER,
    }


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN ENDPOINT — /api/v1/analyze
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@app.post(
    "/api/v1/analyze",
    response_model=AnalysisResponse,
    tags=["Processing"],
    summary="Upload a document and receive its analysis",
)
async def analyze_document(
    file: UploadFile = File(...),
    analyzer: AnalysisService = Depends(get_analyzer),
):
    """
    Single endpoint that:
    1. Validates the upload (name, size, type) before reading it
    2. Extracts its text
    3. Sends one analysis request to the configured model
    4. Returns the analysis with its summary / questions / overview views
    """
    start = time.perf_counter()

    document = await intake_file(file, settings)
    analysis = await analyzer.analyze(document.text, document.file_name)

    elapsed = time.perf_counter() - start
    response = AnalysisResponse(
        status="success",
        meta=ProcessingMeta(
            processing_time=f"{elapsed:.1f}s",
            file_name=document.file_name,
            characters=len(document.text),
            truncated=len(document.text) > analyzer.settings.MAX_PROMPT_CHARS,
            warning=document.warning,
        ),
        data=ResponseData(
            analysis=analysis,
            views=AnalysisViews(
                summary=summary_view(analysis, document.file_name),
                questions=questions_view(analysis),
                overview=overview_view(analysis),
            ),
        ),
    )

    logger.info(
        f"[PROCESS] ✓ {document.file_name} — {len(analysis.quiz)} quiz questions — "
        f"{analysis.difficulty.value} — {elapsed:.1f}s"
    )
    return response


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("studylens.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
