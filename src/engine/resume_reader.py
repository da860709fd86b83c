import io
import logging
import os
from typing import Optional

from engine.utils import MAX_RESUME_CHARS, sanitize_text

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt"}
ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}


class ResumeUploadError(ValueError):
    """The uploaded resume is too large, of an unsupported type, or unreadable."""


def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def validate_upload(filename: str, size: int, mime_type: Optional[str] = None) -> None:
    if size > MAX_UPLOAD_BYTES:
        raise ResumeUploadError("File size must be less than 5MB")

    # Browsers do not always send a MIME type; the extension decides then.
    type_ok = (mime_type in ALLOWED_MIME_TYPES) if mime_type else False
    if not type_ok and _extension(filename) not in ALLOWED_EXTENSIONS:
        raise ResumeUploadError("Please upload a PDF, DOC, DOCX, or TXT file")


def extract_text_from_pdf(data: bytes) -> str:
    try:
        from pypdf import PdfReader
    except Exception as e:  # noqa: BLE001
        raise RuntimeError("Missing dependency: pypdf. Install it in your environment.") from e

    reader = PdfReader(io.BytesIO(data))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def extract_text_from_docx(data: bytes) -> str:
    try:
        from docx import Document
    except Exception as e:  # noqa: BLE001
        raise RuntimeError("Missing dependency: python-docx. Install it in your environment.") from e

    doc = Document(io.BytesIO(data))
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def extract_resume_text(filename: str, data: bytes, mime_type: Optional[str] = None) -> str:
    """
    Validate an upload and return its text, sanitized and length-limited.

    Legacy .doc files are read as plain text; that usually recovers most of the
    words even though binary noise remains.
    """
    validate_upload(filename, len(data), mime_type)

    ext = _extension(filename)
    try:
        if ext == ".pdf" or mime_type == "application/pdf":
            text = extract_text_from_pdf(data)
        elif ext == ".docx":
            text = extract_text_from_docx(data)
        else:
            text = data.decode("utf-8", errors="ignore")
    except RuntimeError:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception("Could not read resume %s", filename)
        raise ResumeUploadError("Failed to extract text from the uploaded file") from e

    text = sanitize_text(text, max_len=MAX_RESUME_CHARS)
    if not text:
        raise ResumeUploadError("No readable text found in the uploaded file")

    logger.info("Extracted %d characters from %s", len(text), filename)
    return text
