"""PDF text extraction for analysis context uploads using pypdf.

Turns an uploaded financial report into plain text that can be appended
to the system prompt.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from born_analyst.errors import AttachmentError

logger = logging.getLogger(__name__)

PDF_MAGIC_BYTES = b"%PDF"


class PDFContent(BaseModel):
    """Extracted content from a PDF file.

    Attributes:
        text: Combined text content from all pages.
        pages: Total number of pages in the document.
        title: Document title from the PDF metadata, if any.
    """

    text: str
    pages: int = Field(ge=0)
    title: str | None = None


class PDFParseError(AttachmentError):
    """Raised when PDF parsing fails."""

    pass


def _read_title(reader: PdfReader) -> str | None:
    try:
        if reader.metadata and reader.metadata.title:
            return str(reader.metadata.title)
    except Exception as e:
        logger.warning(f"Failed to read PDF metadata: {e}")
    return None


def extract_pdf_text(file_content: bytes) -> PDFContent:
    """Extract the text of every page of a PDF file.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        PDFContent with extracted text, page count, and title.

    Raises:
        PDFParseError: If the file is empty, not a PDF, or corrupt.
    """
    if not file_content:
        raise PDFParseError("Empty file provided")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise PDFParseError("Invalid PDF: file does not start with PDF header")

    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise PDFParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise PDFParseError(f"Failed to read PDF: {e}") from e

    text_parts: list[str] = []
    for i, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text()
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            continue
        if page_text:
            text_parts.append(page_text)

    text = "\n\n".join(text_parts)
    if not text.strip():
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return PDFContent(text=text, pages=pages, title=_read_title(reader))
