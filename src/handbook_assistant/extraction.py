from __future__ import annotations

import logging
from pathlib import Path

import fitz  # PyMuPDF

from .errors import DocumentProcessingError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
TEXT_MIME_TYPE = "text/plain"


def _extract_pdf_text(file_bytes: bytes) -> str:
    doc = fitz.open(stream=file_bytes, filetype="pdf")
    try:
        pages = [doc.load_page(i).get_text("text") for i in range(doc.page_count)]
    finally:
        doc.close()
    return "\n".join(pages)


def extract_text(file_bytes: bytes, mime_type: str) -> str:
    """Turn uploaded handbook bytes into raw text.

    PDFs are read page by page with PyMuPDF; anything else is decoded as UTF-8.

    Args:
        file_bytes: Raw file content.
        mime_type: Declared content type of the upload.

    Returns:
        Extracted document text.

    Raises:
        DocumentProcessingError: If the file is empty or cannot be parsed.
    """
    if not file_bytes:
        raise DocumentProcessingError("Uploaded handbook is empty.")

    if mime_type == PDF_MIME_TYPE:
        logger.info("Processing PDF file (%d bytes)", len(file_bytes))
        try:
            return _extract_pdf_text(file_bytes)
        except Exception as exc:
            raise DocumentProcessingError(f"Could not read PDF handbook: {exc}") from exc

    logger.info("Processing text file (%d bytes, %s)", len(file_bytes), mime_type or "unknown type")
    return file_bytes.decode("utf-8", errors="replace")


def guess_mime_type(path: str | Path) -> str:
    return PDF_MIME_TYPE if Path(path).suffix.lower() == ".pdf" else TEXT_MIME_TYPE


def load_document(path: str | Path) -> str:
    """Read a handbook from disk and extract its text."""
    file_path = Path(path)
    try:
        file_bytes = file_path.read_bytes()
    except OSError as exc:
        raise DocumentProcessingError(f"Could not read handbook file {file_path}: {exc}") from exc
    return extract_text(file_bytes, guess_mime_type(file_path))
