import io
import logging
import asyncio
from typing import Optional

import docx
import fitz  # PyMuPDF
from fastapi import UploadFile

from studylens.core.config import Settings, settings as default_settings
from studylens.core.exceptions import (
    EmptyContentError,
    ExtractionError,
    FileTooLargeError,
    ValidationError,
)
from studylens.schemas.document import IntakeResult

logger = logging.getLogger(__name__)

MIME_TEXT = "text/plain"
MIME_PDF = "application/pdf"
MIME_DOC = "application/msword"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_MIME_TYPES = {MIME_TEXT, MIME_PDF, MIME_DOC, MIME_DOCX}
SUPPORTED_EXTENSIONS = (".txt", ".pdf", ".doc", ".docx")

LOSSY_WARNING = (
    "Legacy Word (.doc) files are not parsed; the text shown may be garbled. "
    "Only .txt, .pdf and .docx are reliably supported."
)


def _normalise_mime(content_type: Optional[str]) -> str:
    """'Text/Plain; charset=utf-8' -> 'text/plain'."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def validate_upload(
    filename: Optional[str],
    size: Optional[int],
    content_type: Optional[str],
    settings: Settings = default_settings,
) -> None:
    """
    Reject a file before any of its bytes are looked at.
    1. A filename must be present
    2. Declared size must not exceed the limit
    3. Either the MIME type or the extension must be supported
    """
    if not filename:
        raise ValidationError("No filename provided.")

    if size is not None and size > settings.max_file_size_bytes:
        raise FileTooLargeError(
            f"File too large ({size / (1024 * 1024):.1f} MB). "
            f"Maximum is {settings.MAX_FILE_SIZE_MB} MB."
        )

    mime = _normalise_mime(content_type)
    if mime not in SUPPORTED_MIME_TYPES and not filename.lower().endswith(SUPPORTED_EXTENSIONS):
        raise ValidationError(
            "Unsupported file type. Use TXT, PDF, DOC or DOCX.",
            detail=f"name='{filename}', type='{content_type or 'unknown'}'",
        )


def _decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError(
            "Could not read the file as text. Try saving it as UTF-8.",
            detail=str(e),
        )


def _decode_lossy(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


def _extract_from_pdf(data: bytes) -> str:
    """Synchronous PyMuPDF extraction; call through a worker thread."""
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            pages = [page.get_text("text") for page in doc]
    except Exception as e:
        raise ExtractionError("Could not read the PDF file.", detail=str(e))
    return "\n\n".join(p for p in pages if p.strip())


def _extract_from_docx(data: bytes) -> str:
    """Synchronous python-docx extraction: paragraphs, then table cells."""
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError("Could not read the Word document.", detail=str(e))

    lines = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append("\t".join(cell.text for cell in row.cells))
    return "\n".join(lines)


async def extract_text(content: bytes, filename: str, content_type: Optional[str] = None) -> IntakeResult:
    """
    Turn accepted file bytes into text.
    Dispatch order: plain text, PDF, Word XML, legacy Word, anything else.
    Raises EmptyContentError when the result is blank.
    """
    mime = _normalise_mime(content_type)
    name = filename.lower()
    lossy = False
    warning = None

    if mime == MIME_TEXT or name.endswith(".txt"):
        text = _decode_text(content)
    elif mime == MIME_PDF or name.endswith(".pdf"):
        text = await asyncio.to_thread(_extract_from_pdf, content)
    elif mime == MIME_DOCX or name.endswith(".docx"):
        text = await asyncio.to_thread(_extract_from_docx, content)
    elif "word" in mime or name.endswith(".doc"):
        text = _decode_lossy(content)
        lossy, warning = True, LOSSY_WARNING
        logger.warning(f"[INTAKE] {filename}: legacy Word file decoded as raw text")
    else:
        # only reachable by direct callers; intake_file validates the type first
        text = _decode_lossy(content)
        lossy = True

    if not text.strip():
        raise EmptyContentError("The document contains no extractable text.")

    return IntakeResult(
        file_name=filename,
        content_type=mime or "unknown",
        text=text,
        lossy=lossy,
        warning=warning,
    )


async def intake_file(upload: UploadFile, settings: Settings = default_settings) -> IntakeResult:
    """
    Validate an upload and extract its text.
    The declared size is checked before reading; the real size right after.
    """
    filename = upload.filename or ""
    validate_upload(filename, upload.size, upload.content_type, settings)

    content = await upload.read()
    if len(content) > settings.max_file_size_bytes:
        raise FileTooLargeError(
            f"File too large ({len(content) / (1024 * 1024):.1f} MB). "
            f"Maximum is {settings.MAX_FILE_SIZE_MB} MB."
        )

    result = await extract_text(content, filename, upload.content_type)
    logger.info(
        f"[INTAKE] ✓ {filename} — {result.content_type} — {len(result.text)} chars"
        + (" (lossy)" if result.lossy else "")
    )
    return result
